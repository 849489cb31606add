"""Activity log CRUD."""

from __future__ import annotations

from typing import List
import logging

from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession

from ..errors import NotFoundError, ValidationError
from ..models import Activity, as_naive_utc, utcnow
from ..schemas import ActivityWrite

logger = logging.getLogger("seva.services.activities")


def _require_text(payload: ActivityWrite) -> tuple[str, str]:
    title = (payload.title or "").strip()
    description = (payload.description or "").strip()
    if not title or not description:
        raise ValidationError("Title and description are required")
    return title, description


class ActivityService:
    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def _save(self, activity: Activity) -> Activity:
        self.session.add(activity)
        await self.session.commit()
        await self.session.refresh(activity)
        return activity

    async def get(self, activity_id: str) -> Activity:
        activity = await self.session.get(Activity, activity_id)
        if not activity:
            raise NotFoundError("Activity not found")
        return activity

    async def create(self, payload: ActivityWrite) -> Activity:
        title, description = _require_text(payload)
        date = as_naive_utc(payload.date) if payload.date else utcnow()
        activity = Activity(title=title, description=description, date=date)
        return await self._save(activity)

    async def list_all(self) -> List[Activity]:
        result = await self.session.exec(select(Activity).order_by(Activity.date.desc()))
        return result.all()

    async def update(self, activity_id: str, payload: ActivityWrite) -> Activity:
        title, description = _require_text(payload)
        activity = await self.get(activity_id)
        activity.title = title
        activity.description = description
        if payload.date is not None:
            activity.date = as_naive_utc(payload.date)
        return await self._save(activity)

    async def delete(self, activity_id: str) -> None:
        activity = await self.get(activity_id)
        await self.session.delete(activity)
        await self.session.commit()
        logger.info("Deleted activity %s", activity_id)


__all__ = ["ActivityService"]
