from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field, field_validator

from tokenup.schemas.base import TimestampedSchema, ensure_utc
from tokenup.schemas.user import User


class Certificate(TimestampedSchema):
    id: int
    user_id: int
    title: str
    issuer: str
    image_url: str
    description: Optional[str] = None
    certificate_type: str
    token_value: int
    is_verified: bool = False
    verified_at: Optional[datetime] = None
    likes_count: int = 0
    comments_count: int = 0
    file_type: str = "image/jpeg"
    is_pdf: bool = False

    @field_validator("verified_at")
    @classmethod
    def verified_at_as_utc(cls, v: Optional[datetime]) -> Optional[datetime]:
        return ensure_utc(v) if v is not None else None


class CertificateCreate(BaseModel):
    """Fields a user submits; token_value is never accepted from the client."""

    title: str = Field(..., min_length=1, max_length=255)
    issuer: str = Field(..., min_length=1, max_length=255)
    image_url: str = Field(..., min_length=1)
    description: Optional[str] = Field(None, max_length=2000)
    certificate_type: str = Field(..., description="Key from the certificate type table")
    file_type: str = Field("image/jpeg", max_length=100)

    @field_validator("title", "issuer")
    @classmethod
    def must_not_be_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("must not be blank")
        return v.strip()


class CertificateTypeResponse(BaseModel):
    type: str
    label: str
    token_value: int


class VerificationResponse(BaseModel):
    certificate: Certificate
    user: User
    awarded: bool = Field(..., description="False when the certificate was already verified")


class VerificationOutcome(BaseModel):
    certificate: Certificate
    user: User
    awarded: bool
