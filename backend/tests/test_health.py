def test_health_endpoints(client):
    live = client.get("/api/health")
    assert live.status_code == 200
    assert live.json() == {"status": "ok"}

    ready = client.get("/api/health/ready")
    assert ready.status_code == 200
    payload = ready.json()
    assert payload["status"] == "ok"
    assert payload["database"]["missing_tables"] == []


def test_responses_carry_timing_header(client):
    response = client.get("/api/health")

    assert int(response.headers["X-Response-Time-Ms"]) >= 0


def test_oversized_bodies_are_rejected(client, auth_headers):
    response = client.post(
        "/api/classes/",
        content=b"x" * 1_000_001,
        headers={**auth_headers(), "Content-Type": "application/json"},
    )

    assert response.status_code == 413
    assert response.json()["details"] == {}
