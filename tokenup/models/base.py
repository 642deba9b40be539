from datetime import datetime, timezone

from sqlalchemy import Column, DateTime, func
from sqlalchemy.orm import declarative_base, declared_attr

Base = declarative_base()


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class TimestampMixin:
    """Creation timestamp shared by every table"""

    @declared_attr
    def created_at(cls):
        return Column(
            DateTime(timezone=True),
            default=utcnow,
            server_default=func.now(),
            nullable=False,
        )


class BaseModel(Base, TimestampMixin):
    __abstract__ = True
