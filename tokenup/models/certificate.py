from datetime import datetime
from typing import Optional

from sqlalchemy import BigInteger, Boolean, DateTime, ForeignKey, Index, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from tokenup.models.base import BaseModel


class Certificate(BaseModel):
    __tablename__ = "certificates"
    __table_args__ = (
        Index("idx_certificates_user_id", "user_id"),
        Index("idx_certificates_created_at", "created_at"),
    )

    id: Mapped[int] = mapped_column(
        BigInteger().with_variant(Integer, "sqlite"), primary_key=True, autoincrement=True
    )
    user_id: Mapped[int] = mapped_column(
        BigInteger().with_variant(Integer, "sqlite"), ForeignKey("users.id"), nullable=False
    )
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    issuer: Mapped[str] = mapped_column(String(255), nullable=False)
    image_url: Mapped[str] = mapped_column(Text, nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    certificate_type: Mapped[str] = mapped_column(String(50), nullable=False)
    # Derived from certificate_type at creation, never recomputed
    token_value: Mapped[int] = mapped_column(Integer, nullable=False)
    is_verified: Mapped[bool] = mapped_column(
        Boolean, default=False, server_default="0", nullable=False
    )
    verified_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    likes_count: Mapped[int] = mapped_column(
        Integer, default=0, server_default="0", nullable=False
    )
    comments_count: Mapped[int] = mapped_column(
        Integer, default=0, server_default="0", nullable=False
    )
    file_type: Mapped[str] = mapped_column(
        String(100), default="image/jpeg", server_default="image/jpeg", nullable=False
    )
    is_pdf: Mapped[bool] = mapped_column(
        Boolean, default=False, server_default="0", nullable=False
    )
