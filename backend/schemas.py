from datetime import datetime, timezone

from pydantic import BaseModel, ConfigDict, field_validator


class BookmarkRecord(BaseModel):
    """A bookmark as returned by the store, detached from any db session."""
    model_config = ConfigDict(from_attributes=True, frozen=True)

    id: str
    user_id: int
    title: str
    url: str
    created_at: datetime

    @field_validator("created_at")
    @classmethod
    def _assume_utc(cls, v: datetime) -> datetime:
        # SQLite drops tzinfo on the way back out
        if v.tzinfo is None:
            return v.replace(tzinfo=timezone.utc)
        return v


class SessionUser(BaseModel):
    model_config = ConfigDict(from_attributes=True, frozen=True)

    id: int
    email: str
    name: str = ""
    picture: str = ""

    @field_validator("name", "picture", mode="before")
    @classmethod
    def _none_to_empty(cls, v):
        return v or ""


class BookmarkCreate(BaseModel):
    title: str = ""
    url: str = ""
