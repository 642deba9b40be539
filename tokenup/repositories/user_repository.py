from typing import List, Optional, Tuple

from sqlalchemy.orm import Session

from tokenup.models.user import User as UserModel
from tokenup.schemas.user import User as UserSchema
from tokenup.repositories.base import BaseRepository


class UserRepository(BaseRepository[UserModel, UserSchema]):
    def __init__(self, db: Session):
        super().__init__(UserModel, UserSchema, db)

    def get_by_username(self, username: str) -> Optional[UserSchema]:
        return self.get_by_field("username", username)

    def username_exists(self, username: str) -> bool:
        return self.exists(filters={"username": username})

    def create_user(
        self,
        username: str,
        password_hash: str,
        name: str,
        avatar: Optional[str] = None,
        bio: Optional[str] = None,
        commit: bool = True,
    ) -> UserSchema:
        return self.create(
            commit=commit,
            username=username,
            password_hash=password_hash,
            name=name,
            avatar=avatar,
            bio=bio,
            total_tokens=0,
            is_admin=False,
        )

    def list_all(self) -> List[UserSchema]:
        return self.find_all(order_by="id")

    def increment_tokens(self, user_id: int, delta: int) -> int:
        """Atomic ``total_tokens = total_tokens + delta``.

        The update only applies when the result stays non-negative; the
        returned rowcount is 0 for an unknown user or a rejected delta.
        Does not commit.
        """
        return (
            self.db.query(self.model_class)
            .filter(
                self.model_class.id == user_id,
                self.model_class.total_tokens + delta >= 0,
            )
            .update(
                {self.model_class.total_tokens: self.model_class.total_tokens + delta},
                synchronize_session=False,
            )
        )

    def get_top_users(self, limit: int) -> List[UserSchema]:
        model_instances = (
            self.db.query(self.model_class)
            .populate_existing()
            .order_by(self.model_class.total_tokens.desc(), self.model_class.id.asc())
            .limit(limit)
            .all()
        )
        return self._to_schemas(model_instances)

    def set_admin(self, user_id: int, commit: bool = True) -> Optional[UserSchema]:
        return self.update(user_id, commit=commit, is_admin=True)

    def set_avatar(self, user_id: int, avatar: str, commit: bool = True) -> Optional[UserSchema]:
        return self.update(user_id, commit=commit, avatar=avatar)

    def lock_balance(self, user_id: int) -> Optional[int]:
        """Read ``total_tokens`` and hold the row lock until the unit ends."""
        row = (
            self.db.query(self.model_class.total_tokens)
            .filter(self.model_class.id == user_id)
            .with_for_update()
            .first()
        )
        return None if row is None else row.total_tokens

    def set_tokens(self, user_id: int, value) -> int:
        """``total_tokens = value``; ``value`` may be a SQL expression. Does not commit."""
        return (
            self.db.query(self.model_class)
            .filter(self.model_class.id == user_id)
            .update({self.model_class.total_tokens: value}, synchronize_session=False)
        )

    def balance_snapshot(self, user_id: int, *columns) -> Optional[Tuple]:
        """``total_tokens`` plus the given scalar columns, read in one statement."""
        return (
            self.db.query(self.model_class.total_tokens, *columns)
            .filter(self.model_class.id == user_id)
            .first()
        )
