"""Per-article view counters."""

from __future__ import annotations

import logging
from typing import Optional

from contentsite.domain.content.errors import StoreUnavailableError
from contentsite.infra.redis import StoreClient
from contentsite.obs import metrics
from contentsite.settings import settings

LOGGER = logging.getLogger(__name__)

_VIEW_KEY = "research:views:{slug}"


class ViewCounter:
    def __init__(self, store: StoreClient, *, key_prefix: Optional[str] = None) -> None:
        self.store = store
        self.key_prefix = settings.content_key_prefix if key_prefix is None else key_prefix

    def key_for(self, slug: str) -> str:
        return f"{self.key_prefix}{_VIEW_KEY.format(slug=slug)}"

    async def get(self, slug: str) -> int:
        """Current count; zero when unseen or when the store is unreachable."""
        try:
            if not await self.store.ensure_connection():
                return 0
            raw = await self.store.get(self.key_for(slug))
        except StoreUnavailableError:
            return 0
        try:
            return int(raw) if raw else 0
        except ValueError:
            LOGGER.warning("non-numeric view counter", extra={"slug": slug})
            return 0

    async def increment(self, slug: str) -> int:
        if not await self.store.ensure_connection():
            raise StoreUnavailableError()
        views = await self.store.incr(self.key_for(slug))
        metrics.inc_research_view()
        return views


__all__ = ["ViewCounter"]
