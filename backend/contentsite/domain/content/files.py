"""Markdown-with-front-matter reader used as the seed and fallback source."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

import frontmatter
import yaml

from contentsite.domain.content.collections import Collection
from contentsite.domain.content.models import Record, to_jsonable

_EXTENSION = ".md"


def _load(path: Path) -> frontmatter.Post:
    try:
        return frontmatter.load(str(path))
    except yaml.YAMLError as exc:
        raise ValueError(f"{path.name}: invalid front matter") from exc


class FileReader:
    def __init__(self, content_root: Path | str) -> None:
        self.root = Path(content_root)

    def documents(self, directory: str) -> List[Tuple[str, Dict[str, Any]]]:
        """Parse every document in `directory` into (slug, fields) pairs.

        Fields are the front matter plus the body under `content`. A missing
        directory yields an empty list; bad front matter raises ValueError
        naming the file.
        """
        folder = self.root / directory
        if not folder.is_dir():
            return []
        parsed: List[Tuple[str, Dict[str, Any]]] = []
        for path in sorted(folder.glob(f"*{_EXTENSION}")):
            if not path.is_file():
                continue
            post = _load(path)
            fields = to_jsonable(dict(post.metadata))
            fields["content"] = post.content
            parsed.append((path.stem, fields))
        return parsed

    def read(self, collection: Collection) -> List[Record]:
        return [collection.from_file(slug, fields) for slug, fields in self.documents(collection.directory)]

    def read_one(self, directory: str, slug: str) -> Optional[Dict[str, Any]]:
        path = self.root / directory / f"{slug}{_EXTENSION}"
        # slugs come from URLs; keep lookups inside the content tree
        if path.resolve().parent != (self.root / directory).resolve() or not path.is_file():
            return None
        post = _load(path)
        return to_jsonable(dict(post.metadata))

    def read_team(self) -> List[Record]:
        return [{"slug": slug, **fields} for slug, fields in self.documents("team")]

    def read_site_settings(self, site_name: str) -> Dict[str, Any]:
        path = self.root / "settings" / f"site{_EXTENSION}"
        if not path.is_file():
            return {"siteName": site_name}
        post = _load(path)
        return {"siteName": site_name, **to_jsonable(dict(post.metadata))}


__all__ = ["FileReader"]
