from typing import Optional

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from tokenup.core.exceptions import AuthenticationError, AuthorizationError
from tokenup.deps import get_auth_service
from tokenup.schemas.user import User as UserSchema
from tokenup.services.auth_service import AuthService

# JWT Bearer scheme; missing credentials are handled below
security = HTTPBearer(auto_error=False)


def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    auth_service: AuthService = Depends(get_auth_service),
) -> UserSchema:
    """Require a valid bearer token."""
    if not credentials:
        raise AuthenticationError("Authentication required")

    user = auth_service.get_current_user(credentials.credentials)
    if not user:
        raise AuthenticationError("Invalid or expired token")
    return user


def require_admin(
    current_user: UserSchema = Depends(get_current_user),
) -> UserSchema:
    if not current_user.is_admin:
        raise AuthorizationError("Admin access required")
    return current_user
