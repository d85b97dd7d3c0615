import json

import httpx
import pytest

from contentsite.main import app

PDF_BYTES = b"%PDF-1.4\nbody"


@pytest.fixture
def upstream():
	def handler(request):
		if request.url.path.endswith("/missing.pdf"):
			return httpx.Response(404)
		return httpx.Response(200, content=PDF_BYTES, headers={"content-type": "application/pdf"})

	client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
	app.state.http = client
	yield client
	app.state.http = None


@pytest.mark.asyncio
async def test_views_roundtrip(api_client):
	initial = await api_client.get("/api/research/views", params={"slug": "paper"})
	assert initial.json() == {"slug": "paper", "views": 0}

	bumped = await api_client.post("/api/research/views", json={"slug": "paper"})
	assert bumped.status_code == 200
	assert bumped.json() == {"slug": "paper", "views": 1, "success": True}

	again = await api_client.get("/api/research/views", params={"slug": "paper"})
	assert again.json()["views"] == 1


@pytest.mark.asyncio
async def test_views_require_slug(api_client):
	assert (await api_client.get("/api/research/views")).status_code == 400
	assert (await api_client.post("/api/research/views", json={})).status_code == 400
	assert (await api_client.post("/api/research/views", content=b"nope")).status_code == 400


@pytest.mark.asyncio
async def test_views_when_store_down(api_client, offline_store):
	read = await api_client.get("/api/research/views", params={"slug": "paper"})
	assert read.status_code == 200
	assert read.json()["views"] == 0

	write = await api_client.post("/api/research/views", json={"slug": "paper"})
	assert write.status_code == 503


@pytest.mark.asyncio
async def test_file_streams_remote_pdf(api_client, fake_redis, upstream):
	await fake_redis.set("tcc:research", json.dumps([{"slug": "paper", "pdf": "https://cdn.example/paper.pdf"}]))

	response = await api_client.get("/research/files/paper")
	assert response.status_code == 200
	assert response.content == PDF_BYTES
	assert response.headers["content-type"] == "application/pdf"
	assert response.headers["content-disposition"] == 'inline; filename="paper.pdf"'


@pytest.mark.asyncio
async def test_file_redirects_on_upstream_failure(api_client, fake_redis, upstream):
	await fake_redis.set("tcc:research", json.dumps([{"slug": "paper", "pdf": "https://cdn.example/missing.pdf"}]))

	response = await api_client.get("/research/files/paper")
	assert response.status_code == 307
	assert response.headers["location"] == "https://cdn.example/missing.pdf"


@pytest.mark.asyncio
async def test_file_local_path_redirect(api_client, write_doc, upstream):
	write_doc("research", "paper", "title: Paper\npdf: /files/paper.pdf")

	response = await api_client.get("/research/files/paper")
	assert response.status_code == 307
	assert response.headers["location"] == "/files/paper.pdf"


@pytest.mark.asyncio
async def test_file_not_found(api_client, upstream):
	response = await api_client.get("/research/files/unknown")
	assert response.status_code == 404
