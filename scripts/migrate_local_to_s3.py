#!/usr/bin/env python
"""
Migration helper that copies locally stored complaint images into S3 and
rewrites the stored references.

Usage:
    python scripts/migrate_local_to_s3.py --storage-dir ./storage --bucket seva-complaints
"""

from __future__ import annotations

import argparse
import asyncio
from dataclasses import replace
from pathlib import Path
import logging

from seva_backend.config import get_settings
from seva_backend.database import dispose_engine
from seva_backend.media_migration import migrate_local_media
from seva_backend.storage_s3 import S3MediaStore


logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(message)s")
logger = logging.getLogger("migrate-local-to-s3")


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Migrate local complaint images to S3")
    parser.add_argument(
        "--storage-dir",
        default=None,
        help="Directory holding local images (defaults to env LOCAL_STORAGE_PATH)",
    )
    parser.add_argument(
        "--bucket",
        default=None,
        help="Override bucket name (defaults to env S3_BUCKET)",
    )
    parser.add_argument(
        "--dry-run", action="store_true", help="Only log actions without uploading"
    )
    return parser.parse_args()


def main() -> None:
    args = parse_args()
    settings = get_settings()
    if args.bucket:
        settings = replace(settings, s3_bucket=args.bucket)

    storage_path = Path(args.storage_dir or settings.local_storage_path)
    if not storage_path.exists():
        raise SystemExit(f"Storage directory {storage_path} not found")

    s3 = S3MediaStore(settings)
    s3.ensure_bucket()

    async def _run() -> int:
        try:
            return await migrate_local_media(storage_path, s3, args.dry_run)
        finally:
            await dispose_engine()

    count = asyncio.run(_run())
    verb = "Would migrate" if args.dry_run else "Migrated"
    logger.info("%s %d image(s) to bucket %s", verb, count, settings.s3_bucket)


if __name__ == "__main__":
    main()
