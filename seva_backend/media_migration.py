"""Copy locally stored complaint images to S3 and rewrite their URLs."""

from __future__ import annotations

from pathlib import Path
import logging

from fastapi.concurrency import run_in_threadpool
from sqlmodel import select

from .database import async_session_factory
from .models import Complaint
from .photo_utils import resolve_content_type
from .storage import LOCAL_URL_PREFIX
from .storage_s3 import S3MediaStore

logger = logging.getLogger("seva.media_migration")

SLOTS = ("before", "after")


async def migrate_local_media(storage_path: Path, s3: S3MediaStore, dry_run: bool = False) -> int:
    """Upload every locally served complaint image to `s3`.

    Keys are kept as-is, so `storage_path / key` is the file on disk and the
    same key is used in the bucket. Returns the number of images migrated
    (or that would be, with `dry_run`).
    """
    migrated = 0
    async with async_session_factory() as session:
        result = await session.exec(select(Complaint))
        for complaint in result.all():
            if not complaint.has_image:
                continue
            for slot in SLOTS:
                key = getattr(complaint, f"image_{slot}_key")
                url = getattr(complaint, f"image_{slot}")
                if not key or f"{LOCAL_URL_PREFIX}/" not in (url or ""):
                    continue  # no image or already remote

                disk_path = storage_path / key
                if not disk_path.exists():
                    logger.warning("Missing %s image for complaint %s at %s", slot, complaint.id, disk_path)
                    continue

                logger.info("Uploading %s to s3 key %s", disk_path, key)
                migrated += 1
                if dry_run:
                    continue
                content_type = resolve_content_type(None, key)
                await run_in_threadpool(s3.put_object, key, disk_path.read_bytes(), content_type)
                setattr(complaint, f"image_{slot}", s3.url_for(key))
                session.add(complaint)

        if not dry_run:
            await session.commit()
    return migrated


__all__ = ["migrate_local_media"]
