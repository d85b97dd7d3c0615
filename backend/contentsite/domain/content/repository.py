"""Read path over the store with file fallback."""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

from contentsite.domain.content.collections import Collection, get_collection
from contentsite.domain.content.files import FileReader
from contentsite.domain.content.models import Record, decode_sequence
from contentsite.infra.redis import StoreClient
from contentsite.obs import metrics
from contentsite.settings import settings

LOGGER = logging.getLogger(__name__)


class ContentRepository:
    """Per-collection accessors preferring the store over on-disk documents.

    A stored value wins unconditionally, including an explicit empty array.
    Files are consulted only when the store is unreachable, holds nothing for
    the key, or returns something that cannot be decoded. The two sources are
    never merged.
    """

    def __init__(self, store: StoreClient, reader: FileReader, *, key_prefix: Optional[str] = None) -> None:
        self.store = store
        self.reader = reader
        self.key_prefix = settings.content_key_prefix if key_prefix is None else key_prefix

    def key_for(self, collection: Collection) -> str:
        return f"{self.key_prefix}{collection.name}"

    async def get_all(self, name: str) -> List[Record]:
        collection = get_collection(name)
        records = await self._from_store(collection)
        if records is None:
            records = self._from_files(collection)
        return collection.order(records)

    async def get_one(self, name: str, identifier: str) -> Optional[Record]:
        collection = get_collection(name)
        for record in await self.get_all(name):
            if collection.identifier_of(record) == identifier:
                return record
        return None

    def get_team(self) -> List[Record]:
        return self.reader.read_team()

    def get_site_settings(self) -> Dict[str, Any]:
        return self.reader.read_site_settings(settings.site_name)

    async def _from_store(self, collection: Collection) -> Optional[List[Record]]:
        key = self.key_for(collection)
        try:
            if not await self.store.ensure_connection():
                return None
            raw = await self.store.get(key)
            if not raw:
                return None
            records = decode_sequence(raw)
        except Exception:
            LOGGER.warning("store read failed, using files", extra={"key": key}, exc_info=True)
            return None
        metrics.inc_content_read(collection.name, "store")
        return records

    def _from_files(self, collection: Collection) -> List[Record]:
        try:
            records = self.reader.read(collection)
        except Exception:
            LOGGER.error(
                "content files unreadable",
                extra={"collection": collection.name, "directory": collection.directory},
                exc_info=True,
            )
            return []
        metrics.inc_content_read(collection.name, "files")
        return records


__all__ = ["ContentRepository"]
