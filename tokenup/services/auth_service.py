import logging
from typing import Optional

from tokenup.config import Settings
from tokenup.core.exceptions import AuthenticationError, ConflictError
from tokenup.core.security import (
    create_access_token,
    decode_access_token,
    hash_password,
    verify_password,
)
from tokenup.schemas.auth import LoginRequest, RegisterRequest, TokenData, TokenResponse
from tokenup.schemas.user import User
from tokenup.store.base import DataStore

logger = logging.getLogger(__name__)


class AuthService:
    """Registration, login and bearer-token resolution"""

    def __init__(self, store: DataStore, settings: Settings):
        self.store = store
        self.settings = settings

    def _issue_token(self, user: User) -> TokenResponse:
        access_token = create_access_token(
            data={"sub": user.username, "user_id": user.id}, settings=self.settings
        )
        return TokenResponse(access_token=access_token, user=user)

    def register(self, request: RegisterRequest) -> TokenResponse:
        if self.store.get_user_by_username(request.username):
            raise ConflictError(f"Username already taken: {request.username}")

        user = self.store.create_user(
            username=request.username,
            password_hash=hash_password(request.password),
            name=request.name,
            avatar=request.avatar,
            bio=request.bio,
        )
        if user.username in self.settings.ADMIN_USERNAMES:
            user = self.store.make_user_admin(user.id)
            logger.info(f"User {user.id} ({user.username}) registered as configured admin")
        else:
            logger.info(f"User {user.id} ({user.username}) registered")
        return self._issue_token(user)

    def login(self, request: LoginRequest) -> TokenResponse:
        user = self.store.get_user_by_username(request.username)
        if not user or not user.password_hash or not verify_password(
            request.password, user.password_hash
        ):
            raise AuthenticationError("Invalid username or password")
        return self._issue_token(user)

    def verify_token(self, token: str) -> Optional[TokenData]:
        payload = decode_access_token(token, self.settings)
        if payload is None:
            return None
        username = payload.get("sub")
        user_id = payload.get("user_id")
        if not isinstance(username, str) or not isinstance(user_id, int):
            return None
        return TokenData(username=username, user_id=user_id)

    def get_current_user(self, token: str) -> Optional[User]:
        token_data = self.verify_token(token)
        if not token_data or token_data.user_id is None:
            return None
        return self.store.get_user(token_data.user_id)
