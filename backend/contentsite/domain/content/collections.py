"""Collection definitions: store keys, identifier fields, ordering and PUT policy."""

from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Optional, Tuple

from contentsite.domain.content.errors import UnknownCollectionError
from contentsite.domain.content.models import Record, parse_timestamp


class Ordering(str, enum.Enum):
    NONE = "none"
    REVERSED = "reversed"
    DATE_DESC = "date_desc"


class UpdatePolicy(str, enum.Enum):
    UPSERT = "upsert"
    REJECT = "reject"


@dataclass(frozen=True)
class Collection:
    name: str
    directory: str
    id_field: str
    ordering: Ordering = Ordering.NONE
    sort_field: Optional[str] = None
    update_policy: UpdatePolicy = UpdatePolicy.UPSERT
    # Collections that carry both fields keep id == slug
    mirror_id: bool = False
    required_fields: Tuple[str, ...] = ()

    def identifier_of(self, record: Any) -> Optional[str]:
        if not isinstance(record, dict):
            return None
        value = record.get(self.id_field)
        if value in (None, ""):
            return None
        return str(value)

    def from_file(self, slug: str, data: Dict[str, Any]) -> Record:
        """Shape a parsed document into a record keyed by its filename slug."""
        if self.mirror_id:
            return {"id": slug, "slug": slug, **data}
        return {self.id_field: slug, **data}

    def normalise(self, record: Record) -> Record:
        if self.mirror_id and record.get("slug"):
            record["id"] = record["slug"]
        return record

    def order(self, records: List[Record]) -> List[Record]:
        if self.ordering is Ordering.REVERSED:
            return list(reversed(records))
        if self.ordering is Ordering.DATE_DESC and self.sort_field:
            field = self.sort_field

            def _key(record: Record) -> Tuple[int, float]:
                ts = parse_timestamp(record.get(field)) if isinstance(record, dict) else None
                # undated records sort after every dated one
                return (0, -ts) if ts is not None else (1, 0.0)

            return sorted(records, key=_key)
        return list(records)


PROGRAMS = Collection("programs", "programs", "slug", mirror_id=True)
RESEARCH = Collection("research", "research", "slug", ordering=Ordering.REVERSED)
TESTIMONIALS = Collection("testimonials", "testimonials", "id", ordering=Ordering.REVERSED)
GALLERY = Collection("gallery", "gallery", "id")
CAREERS = Collection(
    "careers",
    "jobs",
    "slug",
    ordering=Ordering.DATE_DESC,
    sort_field="closingDate",
    update_policy=UpdatePolicy.REJECT,
    required_fields=("title",),
)
ANNOUNCEMENTS = Collection(
    "announcements",
    "announcements",
    "slug",
    ordering=Ordering.DATE_DESC,
    sort_field="date",
    update_policy=UpdatePolicy.REJECT,
    mirror_id=True,
)
ACHIEVEMENTS = Collection(
    "achievements",
    "achievements",
    "slug",
    ordering=Ordering.DATE_DESC,
    sort_field="date",
    update_policy=UpdatePolicy.REJECT,
    mirror_id=True,
)

COLLECTIONS: Dict[str, Collection] = {
    c.name: c
    for c in (PROGRAMS, RESEARCH, TESTIMONIALS, GALLERY, CAREERS, ANNOUNCEMENTS, ACHIEVEMENTS)
}


def get_collection(name: str) -> Collection:
    try:
        return COLLECTIONS[name]
    except KeyError:
        raise UnknownCollectionError(f"unknown collection: {name}") from None


def resolve(names: Optional[Iterable[str]] = None) -> List[Collection]:
    if names is None:
        return list(COLLECTIONS.values())
    return [get_collection(name) for name in names]


__all__ = [
    "Collection",
    "Ordering",
    "UpdatePolicy",
    "COLLECTIONS",
    "PROGRAMS",
    "RESEARCH",
    "TESTIMONIALS",
    "GALLERY",
    "CAREERS",
    "ANNOUNCEMENTS",
    "ACHIEVEMENTS",
    "get_collection",
    "resolve",
]
