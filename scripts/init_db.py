import os
import sys

sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from tokenup.config import get_settings
from tokenup.database.connection import create_db_engine
from tokenup.models import Base


def init_db():
    """Create all tables for the configured DATABASE_URL"""
    settings = get_settings()
    engine = create_db_engine(settings)
    try:
        Base.metadata.create_all(bind=engine)
        print(f"Database initialized successfully: {engine.url.render_as_string(hide_password=True)}")
    except Exception as e:
        print(f"Database initialization failed: {str(e)}")
        raise
    finally:
        engine.dispose()


if __name__ == "__main__":
    init_db()
