from typing import List, Optional

from sqlalchemy import and_
from sqlalchemy.orm import Session

from tokenup.models.engagement import Comment as CommentModel, Like as LikeModel
from tokenup.schemas.engagement import Comment as CommentSchema, Like as LikeSchema
from tokenup.repositories.base import BaseRepository


class LikeRepository(BaseRepository[LikeModel, LikeSchema]):
    def __init__(self, db: Session):
        super().__init__(LikeModel, LikeSchema, db)

    def find(self, user_id: int, certificate_id: int) -> Optional[LikeSchema]:
        model_instance = (
            self.db.query(self.model_class)
            .filter(
                and_(
                    self.model_class.user_id == user_id,
                    self.model_class.certificate_id == certificate_id,
                )
            )
            .first()
        )
        return self._to_schema(model_instance)

    def insert(self, user_id: int, certificate_id: int) -> LikeSchema:
        """Flush a new like row without committing or rolling back.

        The unique constraint on (user_id, certificate_id) surfaces as
        IntegrityError for the caller to handle.
        """
        instance = self.model_class(user_id=user_id, certificate_id=certificate_id)
        self.db.add(instance)
        self.db.flush()
        return self._to_schema(instance)

    def delete_pair(self, user_id: int, certificate_id: int) -> int:
        """Delete the like row for the pair. Does not commit."""
        return (
            self.db.query(self.model_class)
            .filter(
                self.model_class.user_id == user_id,
                self.model_class.certificate_id == certificate_id,
            )
            .delete(synchronize_session=False)
        )

    def list_for_certificate(self, certificate_id: int) -> List[LikeSchema]:
        return self.find_all(
            filters={"certificate_id": certificate_id}, order_by="id"
        )


class CommentRepository(BaseRepository[CommentModel, CommentSchema]):
    def __init__(self, db: Session):
        super().__init__(CommentModel, CommentSchema, db)

    def list_for_certificate(self, certificate_id: int) -> List[CommentSchema]:
        model_instances = (
            self.db.query(self.model_class)
            .filter(self.model_class.certificate_id == certificate_id)
            .order_by(self.model_class.created_at.desc(), self.model_class.id.desc())
            .all()
        )
        return self._to_schemas(model_instances)
