from typing import Optional

from pydantic import BaseModel, Field

from tokenup.schemas.base import TimestampedSchema


class User(TimestampedSchema):
    id: int
    username: str
    name: str
    avatar: Optional[str] = None
    bio: Optional[str] = None
    total_tokens: int = 0
    is_admin: bool = False
    # Loaded for credential checks only, never serialized
    password_hash: Optional[str] = Field(default=None, exclude=True, repr=False)


class UserSummary(BaseModel):
    """Public poster summary attached to comments"""

    id: int
    name: str
    avatar: Optional[str] = None

    class Config:
        from_attributes = True


class AvatarUpdate(BaseModel):
    avatar: str = Field(..., min_length=1, max_length=2048)
