"""Common FastAPI dependencies."""

from fastapi import Depends, Request
from sqlmodel.ext.asyncio.session import AsyncSession

from .config import get_settings
from .database import get_session
from .services import ActivityService, ComplaintService
from .storage import MediaStore


def get_media_store(request: Request) -> MediaStore:
    """Process-wide media store created in the application lifespan."""
    return request.app.state.media_store


async def get_complaint_service(
    session: AsyncSession = Depends(get_session),
    media: MediaStore = Depends(get_media_store),
) -> ComplaintService:
    return ComplaintService(session, media, get_settings())


async def get_activity_service(
    session: AsyncSession = Depends(get_session),
) -> ActivityService:
    return ActivityService(session)


__all__ = ["get_media_store", "get_complaint_service", "get_activity_service"]
