#!/usr/bin/env python3
"""
Content Migration Script

Seeds the content store from the Markdown files under CONTENT_ROOT.
Collections that already hold data are skipped unless --force is given.

Usage:
    python migrate_content.py
    python migrate_content.py --force --collections programs,research

Environment Variables:
    REDIS_URL, CONTENT_ROOT, CONTENT_KEY_PREFIX
"""

import argparse
import asyncio
import json
import sys

from contentsite.domain.content.admin import parse_identifiers
from contentsite.domain.content.files import FileReader
from contentsite.domain.content.migration import migrate_content
from contentsite.infra.redis import StoreClient
from contentsite.settings import settings


async def run(force: bool, collections) -> int:
    store = StoreClient.from_settings(settings)
    try:
        report = await migrate_content(store, FileReader(settings.content_root), collections, force=force)
    finally:
        await store.close()

    print(json.dumps(report.as_dict(), indent=2))
    if report.ok:
        return 0
    return 2 if report.partial else 1


def main() -> int:
    parser = argparse.ArgumentParser(description="Seed the content store from content files")
    parser.add_argument("--force", "-f", action="store_true", help="Overwrite collections that already hold data")
    parser.add_argument("--collections", "-c", help="Comma-separated collection names (default: all)")
    args = parser.parse_args()

    print(f"Content root: {settings.content_root}")
    return asyncio.run(run(args.force, parse_identifiers(args.collections) or None))


if __name__ == "__main__":
    sys.exit(main())
