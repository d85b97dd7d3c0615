"""File-to-store migration.

Copies each file-backed collection into its store key as a full snapshot.
Keys that already hold a non-empty array are skipped unless `force` is set, so
re-running the migration never discards edits made through the admin API by
accident.
"""

from __future__ import annotations

import enum
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional

from contentsite.domain.content.collections import Collection, resolve
from contentsite.domain.content.files import FileReader
from contentsite.domain.content.models import decode_sequence, encode_sequence
from contentsite.infra.redis import StoreClient
from contentsite.obs import metrics
from contentsite.settings import settings

LOGGER = logging.getLogger(__name__)


class MigrationState(str, enum.Enum):
    IDLE = "idle"
    CONNECTING = "connecting"
    CONNECTED = "connected"
    FAILED = "failed"


class CollectionStatus(str, enum.Enum):
    PENDING = "pending"
    READING_FILES = "reading_files"
    WRITING_STORE = "writing_store"
    DONE = "done"
    SKIPPED = "skipped"
    FAILED = "failed"


@dataclass
class CollectionOutcome:
    collection: str
    key: str
    status: CollectionStatus = CollectionStatus.PENDING
    count: int = 0
    existing: int = 0
    error: Optional[str] = None
    failed_step: Optional[str] = None

    def as_dict(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            "collection": self.collection,
            "key": self.key,
            "status": self.status.value,
            "count": self.count,
        }
        if self.existing:
            payload["existing"] = self.existing
        if self.error:
            payload["error"] = self.error
            payload["failed_step"] = self.failed_step
        return payload


@dataclass
class MigrationReport:
    state: MigrationState = MigrationState.IDLE
    force: bool = False
    failed_step: Optional[str] = None
    outcomes: List[CollectionOutcome] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return self.state is MigrationState.CONNECTED and all(
            o.status is not CollectionStatus.FAILED for o in self.outcomes
        )

    @property
    def partial(self) -> bool:
        return self.state is MigrationState.CONNECTED and not self.ok

    @property
    def migrated(self) -> Dict[str, int]:
        return {o.collection: o.count for o in self.outcomes if o.status is CollectionStatus.DONE}

    def as_dict(self) -> Dict[str, Any]:
        if self.ok:
            message = "Migration completed"
        elif self.partial:
            message = "Migration partially completed"
        else:
            message = "Migration failed"
        payload: Dict[str, Any] = {
            "success": self.ok,
            "message": message,
            "state": self.state.value,
            "force": self.force,
            "migrated": self.migrated,
            "collections": [o.as_dict() for o in self.outcomes],
        }
        if self.failed_step:
            payload["failed_step"] = self.failed_step
        return payload


async def migrate_content(
    store: StoreClient,
    reader: FileReader,
    collections: Optional[Iterable[str]] = None,
    *,
    force: bool = False,
    key_prefix: Optional[str] = None,
) -> MigrationReport:
    targets = resolve(collections)
    prefix = settings.content_key_prefix if key_prefix is None else key_prefix
    report = MigrationReport(force=force)

    report.state = MigrationState.CONNECTING
    if not await store.ensure_connection():
        report.state = MigrationState.FAILED
        report.failed_step = MigrationState.CONNECTING.value
        LOGGER.error("migration aborted: store unavailable")
        return report
    report.state = MigrationState.CONNECTED

    for collection in targets:
        outcome = CollectionOutcome(collection=collection.name, key=f"{prefix}{collection.name}")
        report.outcomes.append(outcome)
        await _migrate_one(store, reader, collection, outcome, force=force)
        metrics.inc_migration(collection.name, outcome.status.value)

    LOGGER.info(
        "migration finished",
        extra={"force": force, "migrated": report.migrated, "ok": report.ok},
    )
    return report


async def _migrate_one(
    store: StoreClient,
    reader: FileReader,
    collection: Collection,
    outcome: CollectionOutcome,
    *,
    force: bool,
) -> None:
    outcome.status = CollectionStatus.READING_FILES
    try:
        records = reader.read(collection)
    except Exception as exc:
        _fail(outcome, CollectionStatus.READING_FILES, exc)
        return
    outcome.count = len(records)

    def _apply(raw: Optional[str]):
        current = decode_sequence(raw) if raw else []
        if current and not force:
            return None, len(current)
        return encode_sequence(records), 0

    outcome.status = CollectionStatus.WRITING_STORE
    try:
        existing = await store.compare_and_swap(outcome.key, _apply)
    except Exception as exc:
        _fail(outcome, CollectionStatus.WRITING_STORE, exc)
        return
    if existing:
        outcome.existing = existing
        outcome.count = 0
        outcome.status = CollectionStatus.SKIPPED
        return
    outcome.status = CollectionStatus.DONE


def _fail(outcome: CollectionOutcome, step: CollectionStatus, exc: Exception) -> None:
    outcome.status = CollectionStatus.FAILED
    outcome.failed_step = step.value
    outcome.error = str(exc) or exc.__class__.__name__
    outcome.count = 0
    LOGGER.warning(
        "collection migration failed",
        extra={"collection": outcome.collection, "step": step.value},
        exc_info=True,
    )


__all__ = [
    "MigrationState",
    "CollectionStatus",
    "CollectionOutcome",
    "MigrationReport",
    "migrate_content",
]
