"""
Tests for the service health endpoint.
"""

from anistream.utils.http_client import http_client


def test_health_reports_cache_and_provider(client, monkeypatch):
    async def timed_get(url, timeout=None):
        return 200, 12

    monkeypatch.setattr(http_client, "timed_get", timed_get)

    response = client.get("/health")
    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "healthy"
    assert data["checks"]["cache"]["status"] == "ok"
    assert data["checks"]["anitaku"] == {
        "status": "ok",
        "message": "Anitaku accessible",
        "response_time_ms": 12,
    }


def test_health_degraded_when_provider_unreachable(uncached_client, monkeypatch):
    async def timed_get(url, timeout=None):
        raise ConnectionError("unreachable")

    monkeypatch.setattr(http_client, "timed_get", timed_get)

    response = uncached_client.get("/health")
    data = response.json()
    assert data["status"] == "degraded"
    assert data["checks"]["cache"]["status"] == "disabled"
    assert data["checks"]["anitaku"]["status"] == "error"
