from fastapi import APIRouter, Depends, status

from tokenup.deps import get_auth_service
from tokenup.schemas.auth import LoginRequest, RegisterRequest, TokenResponse
from tokenup.services.auth_service import AuthService

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post("/register", response_model=TokenResponse, status_code=status.HTTP_201_CREATED)
def register(
    request: RegisterRequest,
    auth_service: AuthService = Depends(get_auth_service),
) -> TokenResponse:
    """Create an account and return a bearer token for it"""
    return auth_service.register(request)


@router.post("/login", response_model=TokenResponse)
def login(
    request: LoginRequest,
    auth_service: AuthService = Depends(get_auth_service),
) -> TokenResponse:
    return auth_service.login(request)
