import pytest

from contentsite.settings import settings


@pytest.mark.asyncio
async def test_liveness(api_client):
	response = await api_client.get("/health/live")
	assert response.status_code == 200
	assert response.json() == {"status": "ok"}


@pytest.mark.asyncio
async def test_readiness_with_store(api_client):
	response = await api_client.get("/health/ready")
	assert response.status_code == 200
	body = response.json()
	assert body["status"] == "ok"
	assert body["checks"]["store"]["ok"] is True


@pytest.mark.asyncio
async def test_readiness_degraded_when_store_down(api_client, offline_store):
	response = await api_client.get("/health/ready")
	assert response.status_code == 503
	assert response.json()["status"] == "degraded"


@pytest.mark.asyncio
async def test_metrics_requires_admin(api_client, admin_headers):
	assert (await api_client.get("/metrics")).status_code == 403

	response = await api_client.get("/metrics", headers=admin_headers)
	assert response.status_code == 200
	assert "contentsite_http_requests_total" in response.text


@pytest.mark.asyncio
async def test_metrics_public_when_enabled(api_client, monkeypatch):
	monkeypatch.setattr(settings, "obs_metrics_public", True)
	response = await api_client.get("/metrics")
	assert response.status_code == 200
