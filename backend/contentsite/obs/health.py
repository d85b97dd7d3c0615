"""Health check helpers for liveness and readiness probes."""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Dict, Tuple

from contentsite.infra.redis import StoreClient
from contentsite.obs import metrics
from contentsite.settings import settings

LOGGER = logging.getLogger(__name__)


async def _store_status(store: StoreClient, timeout: float = 0.5) -> Dict[str, Any]:
	try:
		latency = await asyncio.wait_for(store.ping(), timeout=timeout)
	except Exception as exc:
		metrics.mark_redis(False)
		LOGGER.warning("Store readiness check failed", exc_info=True)
		return {"ok": False, "error": exc.__class__.__name__}
	metrics.mark_redis(True, latency_seconds=latency)
	return {"ok": True, "latency_ms": round(latency * 1000, 2)}


def _content_status() -> Dict[str, Any]:
	root = settings.content_root
	return {"ok": root.is_dir(), "root": str(root)}


async def liveness() -> Dict[str, Any]:
	return {"status": "ok"}


async def readiness(store: StoreClient) -> Tuple[int, Dict[str, Any]]:
	"""Ready when the store answers; missing seed files only degrade the report."""
	store_state = await _store_status(store)
	content_state = _content_status()
	ok = bool(store_state.get("ok"))
	status_code = 200 if ok else 503
	return (
		status_code,
		{
			"status": "ok" if ok and content_state["ok"] else "degraded",
			"checks": {
				"store": store_state,
				"content_files": content_state,
			},
		},
	)
