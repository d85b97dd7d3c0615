import sys
from pathlib import Path

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from fakeredis import FakeServer
from fakeredis.aioredis import FakeRedis

# Ensure backend package is importable when tests run from repo root
BACKEND_ROOT = Path(__file__).resolve().parents[1]
if str(BACKEND_ROOT) not in sys.path:
	sys.path.insert(0, str(BACKEND_ROOT))

from contentsite.infra.redis import StoreClient
from contentsite.main import app
from contentsite.settings import settings

ADMIN_TOKEN = "test-admin-token"


def write_document(root: Path, directory: str, slug: str, front_matter: str, body: str = "") -> Path:
	folder = root / directory
	folder.mkdir(parents=True, exist_ok=True)
	path = folder / f"{slug}.md"
	path.write_text(f"---\n{front_matter.strip()}\n---\n{body}", encoding="utf-8")
	return path


@pytest_asyncio.fixture(autouse=True)
async def fake_redis():
	client = FakeRedis(server=FakeServer(), decode_responses=True)
	app.state.store = StoreClient(client=client)
	try:
		yield client
	finally:
		app.state.store = None
		await client.flushall()


@pytest.fixture
def store() -> StoreClient:
	return app.state.store


@pytest.fixture
def offline_store() -> StoreClient:
	server = FakeServer()
	server.connected = False
	offline = StoreClient(client=FakeRedis(server=server, decode_responses=True))
	app.state.store = offline
	return offline


@pytest.fixture(autouse=True)
def force_test_settings(tmp_path, monkeypatch):
	"""Point content at an empty temp tree and enable the admin token."""
	root = tmp_path / "content"
	root.mkdir()
	monkeypatch.setattr(settings, "content_root", root)
	monkeypatch.setattr(settings, "content_key_prefix", "tcc:")
	monkeypatch.setattr(settings, "admin_token", ADMIN_TOKEN)
	monkeypatch.setattr(settings, "obs_metrics_public", False)
	yield


@pytest.fixture
def content_root() -> Path:
	return settings.content_root


@pytest.fixture
def admin_headers() -> dict[str, str]:
	return {"X-Admin-Token": ADMIN_TOKEN}


@pytest.fixture
def write_doc(content_root):
	def _write(directory: str, slug: str, front_matter: str, body: str = "") -> Path:
		return write_document(content_root, directory, slug, front_matter, body)

	return _write


@pytest_asyncio.fixture
async def api_client():
	transport = ASGITransport(app=app)
	async with AsyncClient(transport=transport, base_url="http://testserver") as client:
		yield client
