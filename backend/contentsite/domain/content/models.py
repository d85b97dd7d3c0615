"""Record helpers shared by the reader, repository and admin handlers."""

from __future__ import annotations

import json
from datetime import date, datetime, timezone
from typing import Any, Dict, List, Optional

Record = Dict[str, Any]


def to_jsonable(value: Any) -> Any:
    """Convert YAML-native values (dates, tuples) into JSON-compatible ones."""
    if isinstance(value, datetime):
        return value.isoformat()
    if isinstance(value, date):
        return value.isoformat()
    if isinstance(value, dict):
        return {str(k): to_jsonable(v) for k, v in value.items()}
    if isinstance(value, (list, tuple, set)):
        return [to_jsonable(item) for item in value]
    return value


def parse_timestamp(value: Any) -> Optional[float]:
    """Return a POSIX timestamp for an ISO date/datetime value, or None."""
    if value in (None, ""):
        return None
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, date):
        parsed = datetime(value.year, value.month, value.day)
    elif isinstance(value, str):
        text = value.strip()
        # fromisoformat only learned the Z suffix in 3.11
        if text[-1:] in ("Z", "z"):
            text = text[:-1] + "+00:00"
        try:
            parsed = datetime.fromisoformat(text)
        except ValueError:
            return None
    else:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed.timestamp()


def decode_sequence(raw: str) -> List[Record]:
    data = json.loads(raw)
    if not isinstance(data, list):
        raise ValueError("stored collection is not a JSON array")
    return data


def encode_sequence(records: List[Record]) -> str:
    return json.dumps(records, ensure_ascii=False, separators=(",", ":"))


__all__ = ["Record", "to_jsonable", "parse_timestamp", "decode_sequence", "encode_sequence"]
