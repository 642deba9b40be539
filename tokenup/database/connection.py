from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from tokenup.config import Settings


def create_db_engine(settings: Settings) -> Engine:
    if settings.is_sqlite:
        kwargs = {"connect_args": {"check_same_thread": False}}
        if settings.DATABASE_URL in ("sqlite://", "sqlite:///:memory:"):
            # one shared connection, otherwise every session sees an empty db
            kwargs["poolclass"] = StaticPool
        return create_engine(settings.DATABASE_URL, echo=settings.DEBUG, **kwargs)

    return create_engine(
        settings.DATABASE_URL,
        pool_size=settings.DB_POOL_SIZE,
        max_overflow=settings.DB_MAX_OVERFLOW,
        pool_pre_ping=True,  # validate connections before use
        pool_recycle=3600,
        echo=settings.DEBUG,
    )


def create_session_factory(engine: Engine) -> sessionmaker:
    # expire_on_commit=False avoids DetachedInstanceError when attributes are
    # read after commit within the same request scope
    return sessionmaker(
        autocommit=False,
        autoflush=False,
        bind=engine,
        expire_on_commit=False,
    )
