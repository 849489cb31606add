from typing import Optional
from datetime import datetime, timezone
import uuid

from sqlmodel import SQLModel, Field


STATUS_PENDING = "pending"
STATUS_IN_PROGRESS = "in-progress"
STATUS_COMPLETED = "completed"
COMPLAINT_STATUSES = (STATUS_PENDING, STATUS_IN_PROGRESS, STATUS_COMPLETED)


def utcnow() -> datetime:
    # Naive UTC: columns are TIMESTAMP WITHOUT TIME ZONE and asyncpg rejects
    # aware values for them.
    return datetime.now(timezone.utc).replace(tzinfo=None)


def as_naive_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc).replace(tzinfo=None)


class Complaint(SQLModel, table=True):
    __tablename__ = "complaints"
    id: Optional[str] = Field(default_factory=lambda: str(uuid.uuid4()), primary_key=True)
    phone_number: str = Field(index=True)
    category: str
    description: str
    location: str = Field(default="")
    # Stored as plain text: status updates persist whatever value the caller
    # sends, so a DB-level enum would reject rows the API accepts.
    status: str = Field(default=STATUS_PENDING, index=True)

    # Public reference (URL or path) plus the storage key used to delete it.
    image_before: Optional[str] = None
    image_before_key: Optional[str] = None
    image_after: Optional[str] = None
    image_after_key: Optional[str] = None

    # Metadata of the most recently uploaded image
    image_type: Optional[str] = Field(default="image/jpeg")
    file_size: Optional[int] = None

    resolved_at: Optional[datetime] = None
    created_at: Optional[datetime] = Field(default_factory=utcnow, index=True)

    @property
    def has_image(self) -> bool:
        return bool(self.image_before or self.image_after)


class Activity(SQLModel, table=True):
    __tablename__ = "activities"
    id: Optional[str] = Field(default_factory=lambda: str(uuid.uuid4()), primary_key=True)
    title: str
    description: str
    date: Optional[datetime] = Field(default_factory=utcnow, index=True)
