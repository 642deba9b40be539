import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.pool import StaticPool

from tokenup.config import Settings
from tokenup.database.connection import create_session_factory
from tokenup.main import create_app
from tokenup.models import Base
from tokenup.store.memory import MemoryDataStore
from tokenup.store.sql import SqlDataStore


@pytest.fixture
def settings():
    return Settings(
        _env_file=None,
        STORAGE_BACKEND="memory",
        SECRET_KEY="test-secret-key",
        ADMIN_USERNAMES=["admin"],
        LOG_LEVEL="WARNING",
    )


@pytest.fixture
def memory_store():
    return MemoryDataStore()


@pytest.fixture
def sql_engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def sql_store(sql_engine):
    db = create_session_factory(sql_engine)()
    try:
        yield SqlDataStore(db)
    finally:
        db.close()


@pytest.fixture(params=["memory", "sql"])
def store(request):
    """Each contract test runs once per backend"""
    return request.getfixturevalue(f"{request.param}_store")


@pytest.fixture
def file_session_factory(tmp_path):
    """File-backed SQLite so worker threads each get their own connection"""
    engine = create_engine(
        f"sqlite:///{tmp_path / 'tokenup.db'}",
        connect_args={"check_same_thread": False, "timeout": 30},
    )
    Base.metadata.create_all(bind=engine)
    yield create_session_factory(engine)
    engine.dispose()


@pytest.fixture
def app(settings):
    return create_app(settings)


@pytest.fixture
def client(app):
    return TestClient(app)


@pytest.fixture
def register_user(client):
    """Register through the API; returns (user json, auth headers)"""

    def _register(username, password="secret123", name=None):
        res = client.post(
            "/api/v1/auth/register",
            json={"username": username, "password": password, "name": name or username.title()},
        )
        assert res.status_code == 201, res.text
        body = res.json()
        return body["user"], {"Authorization": f"Bearer {body['access_token']}"}

    return _register


@pytest.fixture
def alice(register_user):
    return register_user("alice")


@pytest.fixture
def admin(register_user):
    return register_user("admin")
