from datetime import datetime

from fastapi.testclient import TestClient
from sqlalchemy import create_engine


def test_health_ok(client):
    r = client.get("/_health")

    assert r.status_code == 200
    data = r.json()
    assert data["status"] == "ok"
    assert data["database"] == "connected"
    assert datetime.fromisoformat(data["timestamp"]).tzinfo is not None


def test_health_reports_unreachable_database(client, app, tmp_path):
    assert client.get("/_health").status_code == 200

    # Swap in an engine whose database file can never be opened
    app.state.engine = create_engine(f"sqlite:///{tmp_path / 'missing' / 'gone.db'}")

    r = client.get("/_health")
    assert r.status_code == 503
    data = r.json()
    assert data["status"] == "error"
    assert data["database"] == "disconnected"
    assert "timestamp" in data


def test_health_before_startup(app):
    # Without the context manager the lifespan never runs, so no engine exists
    r = TestClient(app).get("/_health")

    assert r.status_code == 503
    assert r.json()["database"] == "disconnected"


def test_health_is_not_rate_limited(settings):
    from clientdb.main import create_app

    app = create_app(settings.model_copy(update={"RATE_LIMIT_MAX_REQUESTS": 1}))
    with TestClient(app) as client:
        for _ in range(3):
            assert client.get("/_health").status_code == 200
