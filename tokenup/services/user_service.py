import logging
from urllib.parse import urlparse

from tokenup.core.exceptions import AuthorizationError, NotFoundError, ValidationError
from tokenup.schemas.user import User
from tokenup.store.base import DataStore

logger = logging.getLogger(__name__)

AVATAR_SCHEMES = ("http", "https", "data")


class UserService:
    """User lookups, admin promotion and avatar updates"""

    def __init__(self, store: DataStore):
        self.store = store

    def get_user(self, user_id: int) -> User:
        user = self.store.get_user(user_id)
        if not user:
            raise NotFoundError(f"User not found: {user_id}")
        return user

    def promote_to_admin(self, user_id: int, acting_user: User) -> User:
        if not acting_user.is_admin:
            raise AuthorizationError("Admin access required to promote users")
        user = self.store.make_user_admin(user_id)
        logger.info(f"User {user_id} promoted to admin by {acting_user.id}")
        return user

    def update_avatar(self, user_id: int, avatar: str) -> User:
        avatar = avatar.strip()
        if urlparse(avatar).scheme not in AVATAR_SCHEMES:
            raise ValidationError("Avatar must be an http(s) URL or a data URI")
        return self.store.update_user_avatar(user_id, avatar)
