from pydantic import BaseModel, Field

from tokenup.schemas.base import TimestampedSchema
from tokenup.schemas.user import UserSummary


class Like(TimestampedSchema):
    id: int
    user_id: int
    certificate_id: int


class LikeStatus(BaseModel):
    certificate_id: int
    liked: bool
    likes_count: int


class Comment(TimestampedSchema):
    id: int
    user_id: int
    certificate_id: int
    content: str


class CommentCreate(BaseModel):
    content: str = Field(..., description="Comment text, must not be blank")


class CommentWithPoster(Comment):
    user: UserSummary
