import pytest

from hive.settings import settings


@pytest.mark.asyncio
async def test_health_live(api_client):
    resp = await api_client.get("/health/live")
    assert resp.status_code == 200
    assert resp.json() == {"status": "ok"}


@pytest.mark.asyncio
async def test_request_id_is_echoed(api_client):
    resp = await api_client.get("/health/live", headers={"X-Request-Id": "req-123"})
    assert resp.headers["X-Request-Id"] == "req-123"


@pytest.mark.asyncio
async def test_metrics_require_admin_token(api_client, monkeypatch):
    monkeypatch.setattr(settings, "obs_metrics_public", False)
    monkeypatch.setattr(settings, "obs_admin_token", "s3cret")

    denied = await api_client.get("/metrics")
    assert denied.status_code == 403

    allowed = await api_client.get("/metrics", headers={"X-Admin-Token": "s3cret"})
    assert allowed.status_code == 200
    assert "hive_http_requests_total" in allowed.text


@pytest.mark.asyncio
async def test_metrics_closed_without_configured_token(api_client, monkeypatch):
    monkeypatch.setattr(settings, "obs_metrics_public", False)
    monkeypatch.setattr(settings, "obs_admin_token", None)
    resp = await api_client.get("/metrics")
    assert resp.status_code == 403
    assert resp.json()["detail"] == "admin_token_not_configured"
