from sqlalchemy import BigInteger, ForeignKey, Index, Integer, Text
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.schema import UniqueConstraint

from tokenup.models.base import BaseModel

_ID = BigInteger().with_variant(Integer, "sqlite")


class Like(BaseModel):
    __tablename__ = "likes"
    __table_args__ = (
        UniqueConstraint("user_id", "certificate_id", name="uq_like_user_certificate"),
        Index("idx_likes_certificate_id", "certificate_id"),
    )

    id: Mapped[int] = mapped_column(_ID, primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(_ID, ForeignKey("users.id"), nullable=False)
    certificate_id: Mapped[int] = mapped_column(
        _ID, ForeignKey("certificates.id"), nullable=False
    )


class Comment(BaseModel):
    __tablename__ = "comments"
    __table_args__ = (Index("idx_comments_certificate_id", "certificate_id"),)

    id: Mapped[int] = mapped_column(_ID, primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(_ID, ForeignKey("users.id"), nullable=False)
    certificate_id: Mapped[int] = mapped_column(
        _ID, ForeignKey("certificates.id"), nullable=False
    )
    content: Mapped[str] = mapped_column(Text, nullable=False)
