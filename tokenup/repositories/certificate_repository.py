from datetime import datetime, timezone
from typing import List, Optional

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from tokenup.models.certificate import Certificate as CertificateModel
from tokenup.schemas.certificate import Certificate as CertificateSchema
from tokenup.repositories.base import BaseRepository

_COUNTERS = ("likes_count", "comments_count")


class CertificateRepository(BaseRepository[CertificateModel, CertificateSchema]):
    def __init__(self, db: Session):
        super().__init__(CertificateModel, CertificateSchema, db)

    def list_newest_first(self, user_id: Optional[int] = None) -> List[CertificateSchema]:
        query = self.db.query(self.model_class).populate_existing()
        if user_id is not None:
            query = query.filter(self.model_class.user_id == user_id)
        query = query.order_by(
            self.model_class.created_at.desc(), self.model_class.id.desc()
        )
        return self._to_schemas(query.all())

    def mark_verified_if_pending(self, certificate_id: int) -> bool:
        """Conditional pending -> verified update. Does not commit.

        Returns True only for the caller whose UPDATE flipped the flag, which
        makes the token award exactly-once even under concurrent verifies.
        """
        rowcount = (
            self.db.query(self.model_class)
            .filter(
                self.model_class.id == certificate_id,
                self.model_class.is_verified.is_(False),
            )
            .update(
                {
                    self.model_class.is_verified: True,
                    self.model_class.verified_at: datetime.now(timezone.utc),
                },
                synchronize_session=False,
            )
        )
        return rowcount == 1

    def adjust_counter(self, certificate_id: int, field: str, delta: int) -> int:
        """Atomic counter increment/decrement floored at zero. Does not commit."""
        if field not in _COUNTERS:
            raise ValueError(f"Unknown counter: {field}")
        column = getattr(self.model_class, field)
        query = self.db.query(self.model_class).filter(
            self.model_class.id == certificate_id
        )
        if delta < 0:
            query = query.filter(column + delta >= 0)
        return query.update({column: column + delta}, synchronize_session=False)

    def sum_verified_tokens(self, user_id: int) -> int:
        total = (
            self.db.query(func.coalesce(func.sum(self.model_class.token_value), 0))
            .filter(
                self.model_class.user_id == user_id,
                self.model_class.is_verified.is_(True),
            )
            .scalar()
        )
        return int(total or 0)

    def verified_sum_subquery(self, user_id: int):
        return (
            select(func.coalesce(func.sum(self.model_class.token_value), 0))
            .where(
                self.model_class.user_id == user_id,
                self.model_class.is_verified.is_(True),
            )
            .scalar_subquery()
        )

    def verified_count_subquery(self, user_id: int):
        return (
            select(func.count(self.model_class.id))
            .where(
                self.model_class.user_id == user_id,
                self.model_class.is_verified.is_(True),
            )
            .scalar_subquery()
        )
