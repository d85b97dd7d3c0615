"""Admin mutations over whole-collection blobs.

Every mutation is a read-modify-write of the full JSON array for one
collection. Writes go through `StoreClient.compare_and_swap`, so a concurrent
writer forces a re-read instead of silently losing its change.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Iterable, List, Optional, Sequence

from contentsite.domain.content.collections import CAREERS, Collection, UpdatePolicy
from contentsite.domain.content.errors import (
    ContentError,
    DuplicateRecordError,
    RecordNotFoundError,
    StoreUnavailableError,
    ValidationError,
)
from contentsite.domain.content.models import Record, decode_sequence, encode_sequence
from contentsite.domain.content.slugs import slugify
from contentsite.infra.redis import StoreClient
from contentsite.obs import metrics
from contentsite.obs.logging import get_logger
from contentsite.settings import settings

LOGGER = logging.getLogger(__name__)
audit_logger = get_logger("audit.content")


@dataclass
class CreateResult:
    record: Record
    total: int


@dataclass
class UpdateResult:
    record: Record
    created: bool


@dataclass
class DeleteResult:
    deleted_count: int
    deleted: List[str] = field(default_factory=list)
    remaining: int = 0


def parse_identifiers(raw: Optional[str]) -> List[str]:
    """Split a comma-separated identifier list, dropping blanks."""
    if not raw:
        return []
    return [part.strip() for part in raw.split(",") if part.strip()]


def _load(raw: Optional[str]) -> List[Record]:
    return decode_sequence(raw) if raw else []


class CollectionAdmin:
    def __init__(self, store: StoreClient, collection: Collection, *, key_prefix: Optional[str] = None) -> None:
        self.store = store
        self.collection = collection
        prefix = settings.content_key_prefix if key_prefix is None else key_prefix
        self.key = f"{prefix}{collection.name}"

    async def list(self) -> List[Record]:
        await self._require_store()
        if self.collection is CAREERS:
            records = await self.store.compare_and_swap(self.key, self._fill_missing_slugs)
        else:
            records = _load(await self.store.get(self.key))
        return self.collection.order(records)

    async def get(self, identifier: str) -> Record:
        for record in await self.list():
            if self.collection.identifier_of(record) == identifier:
                return record
        raise RecordNotFoundError(f"{self.collection.name} record not found: {identifier}")

    async def replace_all(self, payload: Any) -> List[Record]:
        if not isinstance(payload, list):
            raise ValidationError("payload must be a JSON array")
        await self._require_store()
        async with self._tracked("replace"):
            await self.store.set(self.key, encode_sequence(payload))
        self._audit("replace", count=len(payload))
        return payload

    async def create(self, payload: Any) -> CreateResult:
        record = self._validated(payload)
        identifier = self.collection.identifier_of(record)

        def _apply(raw: Optional[str]):
            records = _load(raw)
            if any(self.collection.identifier_of(existing) == identifier for existing in records):
                raise DuplicateRecordError(f"{self.collection.name} with this {self.collection.id_field} already exists")
            records.append(record)
            return encode_sequence(records), CreateResult(record=record, total=len(records))

        await self._require_store()
        async with self._tracked("create"):
            result = await self.store.compare_and_swap(self.key, _apply)
        self._audit("create", identifiers=[identifier])
        return result

    async def update(self, payload: Any) -> UpdateResult:
        record = self._validated(payload, check_required=False)
        identifier = self.collection.identifier_of(record)
        upsert = self.collection.update_policy is UpdatePolicy.UPSERT

        def _apply(raw: Optional[str]):
            records = _load(raw)
            for index, existing in enumerate(records):
                if self.collection.identifier_of(existing) == identifier:
                    records[index] = record
                    return encode_sequence(records), UpdateResult(record=record, created=False)
            if not upsert:
                raise RecordNotFoundError(f"{self.collection.name} record not found: {identifier}")
            records.append(record)
            return encode_sequence(records), UpdateResult(record=record, created=True)

        await self._require_store()
        async with self._tracked("update"):
            result = await self.store.compare_and_swap(self.key, _apply)
        self._audit("update", identifiers=[identifier], inserted=result.created)
        return result

    async def delete(
        self,
        *,
        identifier: Optional[str] = None,
        identifiers: Optional[Sequence[str]] = None,
    ) -> DeleteResult:
        single = bool(identifier)
        targets = [identifier] if single else list(identifiers or [])
        if not targets:
            raise ValidationError(f"{self.collection.id_field} or {self.collection.id_field}s parameter is required")
        wanted = set(targets)

        def _apply(raw: Optional[str]):
            records = _load(raw)
            kept = [r for r in records if self.collection.identifier_of(r) not in wanted]
            removed = [r for r in records if self.collection.identifier_of(r) in wanted]
            if not removed:
                if single:
                    raise RecordNotFoundError(f"{self.collection.name} record not found: {identifier}")
                return None, DeleteResult(deleted_count=0, remaining=len(records))
            deleted = _unique(self.collection.identifier_of(r) for r in removed)
            return encode_sequence(kept), DeleteResult(
                deleted_count=len(removed),
                deleted=deleted,
                remaining=len(kept),
            )

        await self._require_store()
        async with self._tracked("delete"):
            result = await self.store.compare_and_swap(self.key, _apply)
        self._audit("delete", identifiers=result.deleted, count=result.deleted_count)
        return result

    def _validated(self, payload: Any, *, check_required: bool = True) -> Record:
        name = self.collection.name
        if not isinstance(payload, dict):
            raise ValidationError(f"invalid {name} payload: expected an object")
        if self.collection.identifier_of(payload) is None:
            raise ValidationError(f"invalid {name} payload: {self.collection.id_field} is required")
        if check_required:
            missing = [f for f in self.collection.required_fields if payload.get(f) in (None, "")]
            if missing:
                raise ValidationError(f"invalid {name} payload: {', '.join(missing)} required")
        return self.collection.normalise(dict(payload))

    def _fill_missing_slugs(self, raw: Optional[str]):
        records = _load(raw)
        changed = False
        for record in records:
            if isinstance(record, dict) and not record.get("slug") and record.get("title"):
                record["slug"] = slugify(str(record["title"]))
                changed = True
        if changed:
            LOGGER.info("generated missing slugs", extra={"collection": self.collection.name})
            return encode_sequence(records), records
        return None, records

    async def _require_store(self) -> None:
        if not await self.store.ensure_connection():
            raise StoreUnavailableError()

    def _tracked(self, op: str) -> "_MutationTracker":
        return _MutationTracker(self.collection.name, op)

    def _audit(self, op: str, **extra: Any) -> None:
        audit_logger.info(
            "content_mutation",
            extra={"collection": self.collection.name, "op": op, **extra},
        )


class _MutationTracker:
    """Counts a mutation outcome by the error class it ended with."""

    def __init__(self, collection: str, op: str) -> None:
        self.collection = collection
        self.op = op

    async def __aenter__(self) -> "_MutationTracker":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> bool:
        if exc is None:
            result = "ok"
        elif isinstance(exc, ContentError):
            result = exc.code
        else:
            result = "error"
        metrics.inc_content_mutation(self.collection, self.op, result)
        return False


def _unique(values: Iterable[Optional[str]]) -> List[str]:
    seen: List[str] = []
    for value in values:
        if value is not None and value not in seen:
            seen.append(value)
    return seen


__all__ = [
    "CollectionAdmin",
    "CreateResult",
    "UpdateResult",
    "DeleteResult",
    "parse_identifiers",
]
