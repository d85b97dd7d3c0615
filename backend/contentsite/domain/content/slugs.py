"""URL-safe slug generation."""

from __future__ import annotations

import re

_INVALID = re.compile(r"[^a-z0-9\s-]")
_WHITESPACE = re.compile(r"\s+")
_DASHES = re.compile(r"-+")


def slugify(title: str) -> str:
    slug = _INVALID.sub("", title.lower().strip())
    slug = _WHITESPACE.sub("-", slug)
    slug = _DASHES.sub("-", slug)
    return slug.strip("-")
