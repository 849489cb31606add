"""Request/response schemas for the HTTP surface.

Input structs keep every field optional so missing values reach the service
layer, which reports them as 400 validation errors rather than FastAPI's 422.
JSON keys are camelCase to match the mobile app and admin panel.
"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class ComplaintCreate(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    phone_number: Optional[str] = Field(None, alias="phoneNumber")
    category: Optional[str] = None
    description: Optional[str] = None
    location: Optional[str] = None
    status: Optional[str] = None


class StatusUpdate(BaseModel):
    status: Optional[str] = None


class ComplaintRead(BaseModel):
    model_config = ConfigDict(populate_by_name=True, from_attributes=True)

    id: str
    phone_number: str = Field(alias="phoneNumber")
    category: str
    description: str
    location: Optional[str] = ""
    status: str
    image_before: Optional[str] = Field(None, alias="imageBefore")
    image_before_key: Optional[str] = Field(None, alias="imageBeforeKey")
    image_after: Optional[str] = Field(None, alias="imageAfter")
    image_after_key: Optional[str] = Field(None, alias="imageAfterKey")
    image_type: Optional[str] = Field(None, alias="imageType")
    file_size: Optional[int] = Field(None, alias="fileSize")
    resolved_at: Optional[datetime] = Field(None, alias="resolvedAt")
    created_at: Optional[datetime] = Field(None, alias="createdAt")


class ComplaintStats(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    total: int
    pending: int
    in_progress: int = Field(alias="inProgress")
    completed: int
    with_images: int = Field(alias="withImages")


class ActivityWrite(BaseModel):
    title: Optional[str] = None
    description: Optional[str] = None
    date: Optional[datetime] = None


class ActivityRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    title: str
    description: str
    date: Optional[datetime] = None


class MessageResponse(BaseModel):
    message: str
