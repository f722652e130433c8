"""Tests for health and readiness endpoints."""


async def test_liveness(client):
    response = await client.get("/health")

    assert response.status_code == 200
    body = response.json()
    assert body["status"] == "healthy"
    assert body["service"] == "FisioHub"


async def test_readiness_checks_database(client):
    response = await client.get("/ready")

    assert response.status_code == 200
    body = response.json()
    assert body["status"] == "healthy"
    assert body["services"]["database"]["details"]["dialect"] == "sqlite"


async def test_readiness_reports_unreachable_database(client, database, monkeypatch):
    async def broken_ping() -> None:
        raise ConnectionError("database down")

    monkeypatch.setattr(database, "ping", broken_ping)

    response = await client.get("/ready")

    assert response.status_code == 503
    assert response.json()["services"]["database"]["status"] == "unhealthy"


async def test_root_describes_service(client):
    response = await client.get("/")
    assert response.json()["service"] == "FisioHub"


async def test_unknown_route_uses_error_envelope(client):
    response = await client.get("/api/nothing-here")

    assert response.status_code == 404
    assert response.json()["success"] is False
