#!/usr/bin/env python3
"""
Content Backup Script

Writes every content collection held in the store to a timestamped JSON file.

Usage:
    python backup_content.py
    python backup_content.py --output-dir /backups/content

Environment Variables:
    REDIS_URL, CONTENT_KEY_PREFIX
    BACKUP_DIR: Where snapshot files are written (default: backups)
"""

import argparse
import asyncio
import json
import os
import sys
from datetime import datetime, timezone
from pathlib import Path

from contentsite.domain.content.errors import StoreUnavailableError
from contentsite.infra.redis import StoreClient
from contentsite.maintenance import snapshot
from contentsite.settings import settings


async def run(output_dir: Path) -> int:
    store = StoreClient.from_settings(settings)
    try:
        payload = await snapshot.backup(store)
    except StoreUnavailableError:
        print("Backup failed: content store unavailable", file=sys.stderr)
        return 1
    finally:
        await store.close()

    output_dir.mkdir(parents=True, exist_ok=True)
    filename = f"content_backup_{datetime.now(timezone.utc).strftime('%Y%m%d_%H%M%S')}.json"
    path = output_dir / filename
    path.write_text(json.dumps(payload, indent=2, ensure_ascii=False), encoding="utf-8")

    for key, value in payload["data"].items():
        if value is None:
            print(f"  {key}: no data")
        else:
            print(f"  {key}: {len(value) if isinstance(value, list) else 1} item(s)")
    size_kb = path.stat().st_size / 1024
    print(f"Backup created: {path} ({size_kb:.2f} KB, {snapshot.count_items(payload['data'])} items)")
    return 0


def main() -> int:
    parser = argparse.ArgumentParser(description="Content store backup tool")
    parser.add_argument("--output-dir", "-o", default=os.getenv("BACKUP_DIR", "backups"), help="Directory for snapshot files")
    args = parser.parse_args()

    print("=" * 60)
    print(f"Content Backup - {datetime.now(timezone.utc).isoformat()}")
    print("=" * 60)
    return asyncio.run(run(Path(args.output_dir)))


if __name__ == "__main__":
    sys.exit(main())
