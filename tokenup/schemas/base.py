from datetime import datetime, timezone

from pydantic import BaseModel, field_validator


def ensure_utc(value: datetime) -> datetime:
    """SQLite hands back naive datetimes; treat them as UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


class TimestampedSchema(BaseModel):
    created_at: datetime

    class Config:
        from_attributes = True

    @field_validator("created_at")
    @classmethod
    def created_at_as_utc(cls, v: datetime) -> datetime:
        return ensure_utc(v)
