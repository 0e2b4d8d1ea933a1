def test_health_ok(client):
    r = client.get("/health")
    assert r.status_code == 200
    assert r.json().get("status") == "ok"


def test_health_live_reports_open_sockets(client):
    with client.websocket_connect("/ws"):
        r = client.get("/health/live")
        assert r.status_code == 200
        assert r.json() == {"status": "live", "sockets": 1}


def test_health_ready(client):
    r = client.get("/health/ready")
    assert r.status_code == 200
    assert r.json().get("status") == "ready"


def test_request_id_is_echoed(client):
    r = client.get("/health", headers={"X-Request-ID": "rid-123"})
    assert r.headers["X-Request-ID"] == "rid-123"
    assert r.headers["X-Content-Type-Options"] == "nosniff"
