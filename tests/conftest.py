import pytest
from fastapi.testclient import TestClient

from clientdb.config import Settings
from clientdb.database import create_db_engine, create_session_factory, ensure_schema
from clientdb.main import create_app


@pytest.fixture
def settings(tmp_path):
    return Settings(
        ENVIRONMENT="test",
        DATABASE_URL=f"sqlite:///{tmp_path / 'clients.db'}",
        LOG_LEVEL="DEBUG",
    )


@pytest.fixture
def app(settings):
    return create_app(settings)


@pytest.fixture
def client(app):
    with TestClient(app) as c:
        yield c


@pytest.fixture
def db(settings):
    engine = create_db_engine(settings.DATABASE_URL, settings)
    ensure_schema(engine)
    session = create_session_factory(engine)()
    try:
        yield session
    finally:
        session.close()
        engine.dispose()
