def test_root_and_health_checks(client):
    assert client.get("/").json() == {"status": "ok"}

    health = client.get("/healthz").json()
    assert health["status"] == "ok"
    assert health["service"] == "Lantern Test"

    ready = client.get("/readyz")
    assert ready.status_code == 200
    assert ready.json()["status"] == "ready"


def test_validation_errors_use_error_envelope(client):
    res = client.post("/api/v1/auth/login", json={"data": {"username": "alice"}})
    assert res.status_code == 400
    assert res.json()["error"]["type"] == "InvalidData"
