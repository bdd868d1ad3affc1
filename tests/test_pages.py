def test_home_page(client):
    r = client.get("/")

    assert r.status_code == 200
    assert r.headers["content-type"].startswith("text/html")
    assert "<h1>Client Information Database</h1>" in r.text
    assert 'href="/clients.html"' in r.text


def test_clients_page(client):
    r = client.get("/clients")

    assert r.status_code == 200
    assert r.headers["content-type"].startswith("text/html")
    assert "/api/clients" in r.text


def test_static_file_served_verbatim(client, settings):
    r = client.get("/clients.html")

    assert r.status_code == 200
    assert r.content == (settings.STATIC_DIR / "clients.html").read_bytes()


def test_unknown_path_not_found(client):
    r = client.get("/does-not-exist.txt")

    assert r.status_code == 404
    assert r.json() == {"error": "Not Found"}


def test_favicon_is_empty(client):
    r = client.get("/favicon.ico")

    assert r.status_code == 204
    assert r.content == b""


def test_security_headers(client):
    r = client.get("/")

    csp = r.headers["Content-Security-Policy"]
    assert "default-src 'self'" in csp
    assert "style-src 'self' 'unsafe-inline' https://cdn.jsdelivr.net" in csp
    assert "script-src 'self' 'unsafe-inline'" in csp
    assert "font-src 'self' https://cdn.jsdelivr.net" in csp
    assert "img-src 'self' data: https:" in csp
    assert r.headers["X-Content-Type-Options"] == "nosniff"
    assert r.headers["X-Frame-Options"] == "SAMEORIGIN"


def test_security_headers_on_api_errors(client):
    r = client.get("/api/clients/999")

    assert r.status_code == 404
    assert "Content-Security-Policy" in r.headers


def test_security_headers_on_unhandled_errors(app):
    from fastapi.testclient import TestClient

    from clientdb.dependencies import get_client_service

    class BrokenService:
        def list(self, page, limit):
            raise RuntimeError("boom")

    app.dependency_overrides[get_client_service] = lambda: BrokenService()
    with TestClient(app, raise_server_exceptions=False) as client:
        r = client.get("/api/clients")

    assert r.status_code == 500
    assert r.json() == {"error": "Internal Server Error"}
    assert "default-src 'self'" in r.headers["Content-Security-Policy"]
    assert r.headers["X-Frame-Options"] == "SAMEORIGIN"
