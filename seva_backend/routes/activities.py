"""Activity log routes."""

from __future__ import annotations

from typing import List

from fastapi import APIRouter, Depends, status

from ..dependencies import get_activity_service
from ..schemas import ActivityRead, ActivityWrite, MessageResponse
from ..services import ActivityService


router = APIRouter(prefix="/api/activities", tags=["Activities"])


@router.get("", response_model=List[ActivityRead])
async def list_activities(service: ActivityService = Depends(get_activity_service)):
    return await service.list_all()


@router.post("", response_model=ActivityRead, status_code=status.HTTP_201_CREATED)
async def create_activity(
    payload: ActivityWrite,
    service: ActivityService = Depends(get_activity_service),
):
    return await service.create(payload)


@router.put("/{activity_id}", response_model=ActivityRead)
async def update_activity(
    activity_id: str,
    payload: ActivityWrite,
    service: ActivityService = Depends(get_activity_service),
):
    return await service.update(activity_id, payload)


@router.delete("/{activity_id}", response_model=MessageResponse)
async def delete_activity(
    activity_id: str,
    service: ActivityService = Depends(get_activity_service),
):
    await service.delete(activity_id)
    return MessageResponse(message="Activity deleted successfully")
