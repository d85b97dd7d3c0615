#!/usr/bin/env python3
"""
Content Restore Script

Writes a snapshot produced by backup_content.py back into the store.
Keys recorded as null in the snapshot are left untouched.

Usage:
    python restore_content.py backups/content_backup_YYYYMMDD_HHMMSS.json
    python restore_content.py <file> --keys tcc:programs,tcc:research --yes

Environment Variables:
    REDIS_URL
"""

import argparse
import asyncio
import json
import sys
from pathlib import Path

from contentsite.domain.content.admin import parse_identifiers
from contentsite.domain.content.errors import StoreUnavailableError
from contentsite.infra.redis import StoreClient
from contentsite.maintenance import snapshot
from contentsite.settings import settings


async def run(payload: dict, keys) -> int:
    store = StoreClient.from_settings(settings)
    try:
        results = await snapshot.restore(store, payload, keys)
    except StoreUnavailableError:
        print("Restore failed: content store unavailable", file=sys.stderr)
        return 1
    finally:
        await store.close()

    for key, outcome in results.items():
        print(f"  {key}: {outcome}")
    print("Restore completed")
    return 0


def main() -> int:
    parser = argparse.ArgumentParser(description="Content store restore tool")
    parser.add_argument("snapshot", help="Path to a snapshot JSON file")
    parser.add_argument("--keys", "-k", help="Comma-separated keys to restore (default: all in snapshot)")
    parser.add_argument("--yes", "-y", action="store_true", help="Skip confirmation prompt")
    args = parser.parse_args()

    path = Path(args.snapshot)
    if not path.is_file():
        print(f"Snapshot not found: {path}", file=sys.stderr)
        return 1
    try:
        payload = json.loads(path.read_text(encoding="utf-8"))
    except ValueError as exc:
        print(f"Snapshot is not valid JSON: {exc}", file=sys.stderr)
        return 1

    if not args.yes:
        print()
        print("=" * 60)
        print("WARNING: This will overwrite content in the store!")
        print(f"  Snapshot: {path.name}")
        print(f"  Taken at: {payload.get('timestamp', 'unknown')}")
        print("=" * 60)
        response = input("Type 'yes' to continue: ")
        if response.lower() != "yes":
            print("Restore cancelled")
            return 0

    keys = parse_identifiers(args.keys) or None
    try:
        return asyncio.run(run(payload, keys))
    except ValueError as exc:
        print(f"Restore failed: {exc}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
