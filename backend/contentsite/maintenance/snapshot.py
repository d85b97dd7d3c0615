from __future__ import annotations

import json
import logging
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, List, Optional

from contentsite.domain.content.collections import COLLECTIONS
from contentsite.domain.content.errors import StoreUnavailableError
from contentsite.infra.redis import StoreClient
from contentsite.settings import settings

LOGGER = logging.getLogger(__name__)


def default_keys() -> List[str]:
    return [settings.store_key(name) for name in COLLECTIONS]


async def backup(store: StoreClient, keys: Optional[Iterable[str]] = None) -> Dict[str, Any]:
    """Capture the listed keys as parsed JSON; unparseable values are kept raw."""
    if not await store.ensure_connection():
        raise StoreUnavailableError()
    data: Dict[str, Any] = {}
    for key in keys or default_keys():
        raw = await store.get(key)
        if raw is None:
            data[key] = None
            continue
        try:
            data[key] = json.loads(raw)
        except ValueError:
            LOGGER.warning("backing up unparseable value", extra={"key": key})
            data[key] = raw
    return {
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "environment": settings.environment,
        "data": data,
    }


async def restore(
    store: StoreClient,
    payload: Dict[str, Any],
    keys: Optional[Iterable[str]] = None,
) -> Dict[str, str]:
    """Write snapshot values back; null entries are left alone."""
    data = payload.get("data")
    if not isinstance(data, dict):
        raise ValueError("snapshot has no data section")
    if not await store.ensure_connection():
        raise StoreUnavailableError()
    wanted = set(keys) if keys is not None else None
    results: Dict[str, str] = {}
    for key, value in data.items():
        if wanted is not None and key not in wanted:
            continue
        if value is None:
            results[key] = "skipped"
            continue
        raw = value if isinstance(value, str) else json.dumps(value, ensure_ascii=False, separators=(",", ":"))
        await store.set(key, raw)
        results[key] = "restored"
    LOGGER.info("snapshot restored", extra={"results": results})
    return results


def count_items(data: Dict[str, Any]) -> int:
    total = 0
    for value in data.values():
        if isinstance(value, list):
            total += len(value)
        elif value is not None:
            total += 1
    return total


__all__ = ["backup", "restore", "default_keys", "count_items"]
