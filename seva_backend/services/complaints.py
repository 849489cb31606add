"""
Complaint lifecycle: creation, status changes and before/after image handling.

Image replacement is two independent steps: the superseded asset is deleted
on a best-effort basis (failures are logged and counted, never raised), then
the new image is stored. There is no rollback across the media store and the
database; an image stored before a failed record write stays orphaned.
"""

from __future__ import annotations

from typing import List, Optional
import logging
import time
import uuid

from fastapi.concurrency import run_in_threadpool
from sqlalchemy import or_
from sqlmodel import select, func
from sqlmodel.ext.asyncio.session import AsyncSession

from ..config import Settings, get_settings
from ..errors import StorageError, ValidationError, NotFoundError
from ..models import (
    COMPLAINT_STATUSES,
    STATUS_COMPLETED,
    STATUS_IN_PROGRESS,
    STATUS_PENDING,
    Complaint,
    utcnow,
)
from ..photo_utils import ImageUpload, guess_extension, limit_width, validate_image
from ..schemas import ComplaintCreate, ComplaintStats
from ..storage import MediaStore, StoredMedia
from ..upload_metrics import (
    MEDIA_DELETE_FAILURES,
    UPLOAD_ATTEMPTS,
    UPLOAD_FAILURES,
    UPLOAD_SUCCESSES,
)

logger = logging.getLogger("seva.services.complaints")

BEFORE = "before"
AFTER = "after"

REQUIRED_FIELDS = (
    ("phone_number", "phoneNumber"),
    ("category", "category"),
    ("description", "description"),
)


def _blank(value: Optional[str]) -> bool:
    return value is None or not str(value).strip()


class ComplaintService:
    def __init__(
        self,
        session: AsyncSession,
        media: MediaStore,
        settings: Optional[Settings] = None,
    ) -> None:
        self.session = session
        self.media = media
        self.settings = settings or get_settings()

    # ---------- helpers ----------
    def _validated_fields(self, fields: ComplaintCreate) -> dict:
        missing = [alias for attr, alias in REQUIRED_FIELDS if _blank(getattr(fields, attr))]
        if missing:
            raise ValidationError(f"Missing required fields: {', '.join(missing)}")

        status = STATUS_PENDING if _blank(fields.status) else fields.status.strip()
        if status not in COMPLAINT_STATUSES:
            raise ValidationError(
                f"Invalid status. Allowed: {', '.join(COMPLAINT_STATUSES)}"
            )

        return {
            "phone_number": fields.phone_number.strip(),
            "category": fields.category.strip(),
            "description": fields.description.strip(),
            "location": (fields.location or "").strip(),
            "status": status,
        }

    def _check_image(self, upload: Optional[ImageUpload]) -> None:
        validate_image(
            upload,
            self.settings.max_upload_bytes,
            allow_svg=self.settings.allow_svg_uploads,
        )

    async def _save(self, complaint: Complaint) -> Complaint:
        self.session.add(complaint)
        await self.session.commit()
        await self.session.refresh(complaint)
        return complaint

    async def _store_image(self, upload: ImageUpload, slot: str, stem: str) -> StoredMedia:
        UPLOAD_ATTEMPTS.labels(slot=slot).inc()
        name = f"{stem}_{int(time.time() * 1000)}_{uuid.uuid4().hex[:12]}"
        name = f"{name}.{guess_extension(upload.content_type, upload.filename)}"
        data = await run_in_threadpool(
            limit_width, upload.data, upload.content_type, self.settings.image_max_width
        )
        try:
            stored = await self.media.store(data, slot, name, upload.content_type)
        except StorageError:
            UPLOAD_FAILURES.labels(slot=slot).inc()
            raise
        UPLOAD_SUCCESSES.labels(slot=slot).inc()
        return stored

    async def _discard(self, key: str) -> None:
        try:
            await self.media.delete(key)
        except StorageError as exc:
            MEDIA_DELETE_FAILURES.inc()
            logger.warning("Could not delete superseded image %s: %s", key, exc)

    async def _attach(self, complaint_id: str, upload: Optional[ImageUpload], slot: str) -> Complaint:
        complaint = await self.get(complaint_id)
        self._check_image(upload)

        old_key = getattr(complaint, f"image_{slot}_key")
        if old_key:
            await self._discard(old_key)

        stored = await self._store_image(upload, slot, f"{slot}_{complaint.id}")
        setattr(complaint, f"image_{slot}", stored.url)
        setattr(complaint, f"image_{slot}_key", stored.key)
        complaint.image_type = upload.content_type
        complaint.file_size = upload.size
        return complaint

    async def _count(self, *conditions) -> int:
        statement = select(func.count(Complaint.id))
        for condition in conditions:
            statement = statement.where(condition)
        result = await self.session.exec(statement)
        return result.one()

    @staticmethod
    def _has_image():
        return or_(Complaint.image_before.is_not(None), Complaint.image_after.is_not(None))

    # ---------- operations ----------
    async def get(self, complaint_id: str) -> Complaint:
        complaint = await self.session.get(Complaint, complaint_id)
        if not complaint:
            raise NotFoundError("Complaint not found")
        return complaint

    async def create(self, fields: ComplaintCreate) -> Complaint:
        complaint = await self._save(Complaint(**self._validated_fields(fields)))
        logger.info("Complaint saved: %s", complaint.id)
        return complaint

    async def create_with_before_image(
        self, fields: ComplaintCreate, upload: Optional[ImageUpload]
    ) -> Complaint:
        values = self._validated_fields(fields)
        self._check_image(upload)

        stored = await self._store_image(upload, BEFORE, "complaint")
        complaint = Complaint(
            **values,
            image_before=stored.url,
            image_before_key=stored.key,
            image_type=upload.content_type,
            file_size=upload.size,
        )
        complaint = await self._save(complaint)
        logger.info("Complaint with image saved: %s", complaint.id)
        return complaint

    async def attach_before_image(
        self, complaint_id: str, upload: Optional[ImageUpload]
    ) -> Complaint:
        complaint = await self._attach(complaint_id, upload, BEFORE)
        return await self._save(complaint)

    async def attach_after_image(
        self, complaint_id: str, upload: Optional[ImageUpload]
    ) -> Complaint:
        complaint = await self._attach(complaint_id, upload, AFTER)
        complaint.status = STATUS_COMPLETED
        complaint.resolved_at = utcnow()
        complaint = await self._save(complaint)
        logger.info("Complaint %s resolved with after image", complaint.id)
        return complaint

    async def update_status(self, complaint_id: str, status: Optional[str]) -> Complaint:
        complaint = await self.get(complaint_id)
        if _blank(status):
            raise ValidationError("Status is required")

        if status not in COMPLAINT_STATUSES:
            # Persisted as sent; callers rely on the permissive update.
            logger.warning("Complaint %s set to unrecognised status %r", complaint_id, status)

        complaint.status = status
        # resolved_at is never cleared when a complaint leaves `completed`.
        if status == STATUS_COMPLETED:
            complaint.resolved_at = utcnow()
        return await self._save(complaint)

    async def list_all(self) -> List[Complaint]:
        statement = select(Complaint).order_by(Complaint.created_at.desc())
        result = await self.session.exec(statement)
        return result.all()

    async def list_by_phone(self, phone_number: str) -> List[Complaint]:
        statement = (
            select(Complaint)
            .where(Complaint.phone_number == phone_number)
            .order_by(Complaint.created_at.asc(), Complaint.id.asc())
        )
        result = await self.session.exec(statement)
        return result.all()

    async def list_with_images(self, limit: int = 50) -> List[Complaint]:
        if limit < 1:
            raise ValidationError("limit must be at least 1")
        statement = (
            select(Complaint)
            .where(self._has_image())
            .order_by(Complaint.created_at.desc())
            .limit(limit)
        )
        result = await self.session.exec(statement)
        return result.all()

    async def stats(self) -> ComplaintStats:
        return ComplaintStats(
            total=await self._count(),
            pending=await self._count(Complaint.status == STATUS_PENDING),
            in_progress=await self._count(Complaint.status == STATUS_IN_PROGRESS),
            completed=await self._count(Complaint.status == STATUS_COMPLETED),
            with_images=await self._count(self._has_image()),
        )


__all__ = ["ComplaintService", "BEFORE", "AFTER"]
