"""Pydantic models for API request bodies."""

from pydantic import BaseModel, ConfigDict, Field


class CreateEventRequest(BaseModel):
    """Event creation payload; presence is checked by the event service."""

    model_config = ConfigDict(populate_by_name=True)

    name: str | None = None
    max_photos_per_user: int | None = Field(default=None, alias="maxPhotosPerUser")
    expiry_days: int | None = Field(default=None, alias="expiryDays")


class UploadPhotoRequest(BaseModel):
    """Photo upload payload carrying a base64 data URL."""

    model_config = ConfigDict(populate_by_name=True)

    photo_data: str | None = Field(default=None, alias="photoData")
    user_id: str | None = Field(default=None, alias="userId")
