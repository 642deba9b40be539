"""
Certificate API router

Certificates:
- GET /certificates: all certificates, or one owner's with ?user_id=
- GET /certificates/types: certificate type table
- GET /certificates/{id}: single certificate
- POST /certificates: submit a certificate (pending until verified)
- POST /certificates/{id}/verify: verify and award tokens (admin)

Engagement:
- POST/DELETE/GET /certificates/{id}/like: like, unlike, has-liked
- GET /certificates/{id}/likes: likes on a certificate
- GET/POST /certificates/{id}/comments: list or post comments
"""

from typing import List, Optional

from fastapi import APIRouter, Depends, Path, Query, status

from tokenup.core.auth_middleware import get_current_user
from tokenup.deps import get_certificate_service, get_engagement_service
from tokenup.schemas.certificate import (
    Certificate,
    CertificateCreate,
    CertificateTypeResponse,
    VerificationResponse,
)
from tokenup.schemas.engagement import CommentCreate, CommentWithPoster, Like, LikeStatus
from tokenup.schemas.user import User as UserSchema
from tokenup.services.certificate_service import CertificateService
from tokenup.services.engagement_service import EngagementService

router = APIRouter(prefix="/certificates", tags=["certificates"])


@router.get("", response_model=List[Certificate])
def list_certificates(
    user_id: Optional[int] = Query(None, ge=1, description="Only this owner's certificates"),
    certificate_service: CertificateService = Depends(get_certificate_service),
) -> List[Certificate]:
    return certificate_service.list_certificates(user_id)


@router.get("/types", response_model=List[CertificateTypeResponse])
def list_certificate_types(
    certificate_service: CertificateService = Depends(get_certificate_service),
) -> List[CertificateTypeResponse]:
    return certificate_service.list_certificate_types()


@router.get("/{certificate_id}", response_model=Certificate)
def get_certificate(
    certificate_id: int = Path(..., ge=1),
    certificate_service: CertificateService = Depends(get_certificate_service),
) -> Certificate:
    return certificate_service.get_certificate(certificate_id)


@router.post("", response_model=Certificate, status_code=status.HTTP_201_CREATED)
def create_certificate(
    body: CertificateCreate,
    current_user: UserSchema = Depends(get_current_user),
    certificate_service: CertificateService = Depends(get_certificate_service),
) -> Certificate:
    """
    Submit a certificate for the current user.

    The token value is taken from the certificate type; the certificate
    stays pending until an admin verifies it.
    """
    return certificate_service.create_certificate(current_user.id, body)


@router.post("/{certificate_id}/verify", response_model=VerificationResponse)
def verify_certificate(
    certificate_id: int = Path(..., ge=1),
    current_user: UserSchema = Depends(get_current_user),
    certificate_service: CertificateService = Depends(get_certificate_service),
) -> VerificationResponse:
    """Verify a pending certificate and credit its owner. Admin only."""
    return certificate_service.verify_certificate(certificate_id, current_user)


@router.post("/{certificate_id}/like", response_model=LikeStatus)
def like_certificate(
    certificate_id: int = Path(..., ge=1),
    current_user: UserSchema = Depends(get_current_user),
    engagement_service: EngagementService = Depends(get_engagement_service),
) -> LikeStatus:
    return engagement_service.like(current_user.id, certificate_id)


@router.delete("/{certificate_id}/like", response_model=LikeStatus)
def unlike_certificate(
    certificate_id: int = Path(..., ge=1),
    current_user: UserSchema = Depends(get_current_user),
    engagement_service: EngagementService = Depends(get_engagement_service),
) -> LikeStatus:
    return engagement_service.unlike(current_user.id, certificate_id)


@router.get("/{certificate_id}/like", response_model=LikeStatus)
def get_like_status(
    certificate_id: int = Path(..., ge=1),
    current_user: UserSchema = Depends(get_current_user),
    engagement_service: EngagementService = Depends(get_engagement_service),
) -> LikeStatus:
    return engagement_service.like_status(current_user.id, certificate_id)


@router.get("/{certificate_id}/likes", response_model=List[Like])
def list_likes(
    certificate_id: int = Path(..., ge=1),
    engagement_service: EngagementService = Depends(get_engagement_service),
) -> List[Like]:
    return engagement_service.get_likes(certificate_id)


@router.get("/{certificate_id}/comments", response_model=List[CommentWithPoster])
def list_comments(
    certificate_id: int = Path(..., ge=1),
    engagement_service: EngagementService = Depends(get_engagement_service),
) -> List[CommentWithPoster]:
    return engagement_service.list_comments(certificate_id)


@router.post(
    "/{certificate_id}/comments",
    response_model=CommentWithPoster,
    status_code=status.HTTP_201_CREATED,
)
def add_comment(
    body: CommentCreate,
    certificate_id: int = Path(..., ge=1),
    current_user: UserSchema = Depends(get_current_user),
    engagement_service: EngagementService = Depends(get_engagement_service),
) -> CommentWithPoster:
    return engagement_service.comment(current_user.id, certificate_id, body.content)
