"""
Promote an existing user to admin.

Usage: python scripts/promote_admin.py <username>

Used to bootstrap the first administrator; afterwards admins promote
others through POST /users/{id}/admin.
"""

import os
import sys

sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from tokenup.config import get_settings
from tokenup.database.connection import create_db_engine, create_session_factory
from tokenup.database.session import session_scope
from tokenup.store.sql import SqlDataStore


def promote_admin(username: str) -> int:
    engine = create_db_engine(get_settings())
    try:
        with session_scope(create_session_factory(engine)) as db:
            store = SqlDataStore(db)
            user = store.get_user_by_username(username)
            if user is None:
                print(f"User not found: {username}")
                return 1
            user = store.make_user_admin(user.id)
            print(f"User {user.id} ({user.username}) is now an admin")
            return 0
    finally:
        engine.dispose()


if __name__ == "__main__":
    if len(sys.argv) != 2:
        print(__doc__)
        sys.exit(2)
    sys.exit(promote_admin(sys.argv[1]))
