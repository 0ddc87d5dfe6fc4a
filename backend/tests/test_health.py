def test_health_reports_connected_store(client):
    response = client.get("/api/health")
    assert response.status_code == 200
    body = response.json()
    assert body["status"] == "healthy"
    assert body["database"] == "connected"
    assert body["timestamp"]


def test_unknown_route_uses_error_body(client):
    response = client.get("/api/nope")
    assert response.status_code == 404
    assert response.json() == {"error": "Not Found"}
