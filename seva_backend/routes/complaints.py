"""Complaint routes used by the citizen app and the admin panel."""

from __future__ import annotations

from typing import List, Optional

from fastapi import APIRouter, Depends, File, Form, Query, UploadFile, status

from ..config import get_settings
from ..dependencies import get_complaint_service
from ..photo_utils import read_upload
from ..schemas import ComplaintCreate, ComplaintRead, ComplaintStats, StatusUpdate
from ..services import ComplaintService


router = APIRouter(prefix="/api", tags=["Complaints"])


@router.post("/complaints", response_model=ComplaintRead, status_code=status.HTTP_201_CREATED)
async def create_complaint(
    payload: ComplaintCreate,
    service: ComplaintService = Depends(get_complaint_service),
):
    """Create a complaint without an image."""
    return await service.create(payload)


@router.post("/complaints-with-image", response_model=ComplaintRead, status_code=status.HTTP_201_CREATED)
async def create_complaint_with_image(
    phone_number: Optional[str] = Form(None, alias="phoneNumber"),
    category: Optional[str] = Form(None),
    description: Optional[str] = Form(None),
    location: Optional[str] = Form(None),
    complaint_status: Optional[str] = Form(None, alias="status"),
    image: Optional[UploadFile] = File(None),
    service: ComplaintService = Depends(get_complaint_service),
):
    """Create a complaint with its "before" photo (mobile app upload)."""
    fields = ComplaintCreate(
        phone_number=phone_number,
        category=category,
        description=description,
        location=location,
        status=complaint_status,
    )
    upload = await read_upload(image, get_settings().max_upload_bytes)
    return await service.create_with_before_image(fields, upload)


@router.post("/complaints/{complaint_id}/upload-before", response_model=ComplaintRead)
async def upload_before_image(
    complaint_id: str,
    image: Optional[UploadFile] = File(None),
    service: ComplaintService = Depends(get_complaint_service),
):
    upload = await read_upload(image, get_settings().max_upload_bytes)
    return await service.attach_before_image(complaint_id, upload)


@router.post("/complaints/{complaint_id}/upload-after", response_model=ComplaintRead)
async def upload_after_image(
    complaint_id: str,
    image: Optional[UploadFile] = File(None),
    service: ComplaintService = Depends(get_complaint_service),
):
    """Attach the "after" photo; this marks the complaint completed."""
    upload = await read_upload(image, get_settings().max_upload_bytes)
    return await service.attach_after_image(complaint_id, upload)


@router.get("/complaints", response_model=List[ComplaintRead])
async def list_complaints(service: ComplaintService = Depends(get_complaint_service)):
    return await service.list_all()


@router.get("/complaints/phone/{phone_number}", response_model=List[ComplaintRead])
async def list_complaints_by_phone(
    phone_number: str,
    service: ComplaintService = Depends(get_complaint_service),
):
    return await service.list_by_phone(phone_number)


@router.get("/complaints/{complaint_id}", response_model=ComplaintRead)
async def get_complaint(
    complaint_id: str,
    service: ComplaintService = Depends(get_complaint_service),
):
    return await service.get(complaint_id)


@router.get("/complaints-with-images", response_model=List[ComplaintRead])
async def list_complaints_with_images(
    limit: int = Query(50, ge=1, le=50),
    service: ComplaintService = Depends(get_complaint_service),
):
    return await service.list_with_images(limit)


@router.get("/complaints-stats", response_model=ComplaintStats)
async def complaint_stats(service: ComplaintService = Depends(get_complaint_service)):
    return await service.stats()


@router.put("/complaints/{complaint_id}/status", response_model=ComplaintRead)
async def update_complaint_status(
    complaint_id: str,
    body: StatusUpdate,
    service: ComplaintService = Depends(get_complaint_service),
):
    return await service.update_status(complaint_id, body.status)
