"""
Admin API router

- GET /admin/integrity/{user_id}: compare a balance with verified certificates
- POST /admin/integrity/{user_id}/reconcile: correct a drifted balance

All endpoints require is_admin=True.
"""

from fastapi import APIRouter, Depends, Path

from tokenup.core.auth_middleware import require_admin
from tokenup.deps import get_certificate_service
from tokenup.schemas.analytics import TokenIntegrityCheck
from tokenup.schemas.user import User as UserSchema
from tokenup.services.certificate_service import CertificateService

router = APIRouter(prefix="/admin", tags=["admin"])


@router.get("/integrity/{user_id}", response_model=TokenIntegrityCheck)
def check_user_integrity(
    user_id: int = Path(..., ge=1),
    _: UserSchema = Depends(require_admin),
    certificate_service: CertificateService = Depends(get_certificate_service),
) -> TokenIntegrityCheck:
    return certificate_service.check_token_integrity(user_id)


@router.post("/integrity/{user_id}/reconcile", response_model=TokenIntegrityCheck)
def reconcile_user_tokens(
    user_id: int = Path(..., ge=1),
    admin_user: UserSchema = Depends(require_admin),
    certificate_service: CertificateService = Depends(get_certificate_service),
) -> TokenIntegrityCheck:
    return certificate_service.reconcile_tokens(user_id, admin_user)
