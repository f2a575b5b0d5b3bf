"""Health probe tests."""

from tradeconnect import __version__


async def test_liveness(client):
    resp = await client.get("/api/health/")
    assert resp.status_code == 200
    assert resp.json() == {
        "status": "healthy",
        "service": "tradeconnect-api",
        "version": __version__,
    }


async def test_readiness_with_database(client):
    resp = await client.get("/api/health/ready")
    assert resp.status_code == 200
    assert resp.json()["checks"]["database"] == "healthy"


async def test_unknown_route_is_404(client):
    resp = await client.get("/api/does-not-exist")
    assert resp.status_code == 404
