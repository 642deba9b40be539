import base64
import binascii
import logging
from datetime import datetime, timezone
from typing import List, Mapping, Optional, Tuple
from urllib.parse import urlparse

from tokenup.config import Settings
from tokenup.core.certificate_types import (
    CERTIFICATE_TYPES,
    CertificateTypeInfo,
    get_certificate_type,
    list_certificate_types,
)
from tokenup.core.exceptions import AuthorizationError, NotFoundError, ValidationError
from tokenup.schemas.analytics import TokenIntegrityCheck
from tokenup.schemas.certificate import (
    Certificate,
    CertificateCreate,
    CertificateTypeResponse,
    VerificationResponse,
)
from tokenup.schemas.user import User
from tokenup.store.base import DataStore

logger = logging.getLogger(__name__)

PDF_MEDIA_TYPE = "application/pdf"


class CertificateService:
    """Certificate lifecycle: creation, verification and the token award.

    States are pending and verified. The only transition is pending ->
    verified, performed by an administrator, and it credits the owner with
    the certificate's token value exactly once.
    """

    def __init__(
        self,
        store: DataStore,
        settings: Settings,
        certificate_types: Mapping[str, CertificateTypeInfo] = CERTIFICATE_TYPES,
    ):
        self.store = store
        self.settings = settings
        self.certificate_types = certificate_types

    def list_certificate_types(self) -> List[CertificateTypeResponse]:
        return [
            CertificateTypeResponse(type=info.key, label=info.label, token_value=info.token_value)
            for info in list_certificate_types(self.certificate_types)
        ]

    def _resolve_type(self, certificate_type: str) -> CertificateTypeInfo:
        key = certificate_type.strip().upper()
        info = get_certificate_type(key, self.certificate_types)
        if info is None:
            raise ValidationError(
                f"Unknown certificate type: {certificate_type}",
                details={"allowed": sorted(self.certificate_types)},
            )
        return info

    def _check_media_type(self, media_type: str) -> str:
        media_type = media_type.strip().lower()
        if media_type not in self.settings.ALLOWED_FILE_TYPES:
            raise ValidationError(
                f"Unsupported media type: {media_type}",
                details={"allowed": self.settings.ALLOWED_FILE_TYPES},
            )
        return media_type

    def _check_image_url(self, image_url: str, file_type: str) -> Tuple[str, str]:
        """Validate the upload reference and return (image_url, file_type).

        Inline ``data:`` URIs are size-checked and their declared media type
        wins over the submitted file_type.
        """
        image_url = image_url.strip()
        if image_url.startswith("data:"):
            header, sep, payload = image_url[len("data:"):].partition(",")
            if not sep or ";base64" not in header:
                raise ValidationError("Inline uploads must be base64 data URIs")
            media_type = self._check_media_type(header.split(";", 1)[0] or file_type)
            if len(payload) * 3 // 4 > self.settings.MAX_UPLOAD_BYTES + 2:
                raise ValidationError(
                    "Upload too large",
                    details={"max_bytes": self.settings.MAX_UPLOAD_BYTES},
                )
            try:
                size = len(base64.b64decode(payload, validate=True))
            except (binascii.Error, ValueError):
                raise ValidationError("Inline upload is not valid base64")
            if size > self.settings.MAX_UPLOAD_BYTES:
                raise ValidationError(
                    f"Upload too large: {size} bytes",
                    details={"max_bytes": self.settings.MAX_UPLOAD_BYTES},
                )
            return image_url, media_type

        parsed = urlparse(image_url)
        if parsed.scheme not in ("http", "https") and not image_url.startswith("/"):
            raise ValidationError("image_url must be an http(s) URL, an upload path or a data URI")
        return image_url, self._check_media_type(file_type)

    def create_certificate(self, owner_id: int, data: CertificateCreate) -> Certificate:
        """Create a pending certificate; token_value comes from the type table."""
        info = self._resolve_type(data.certificate_type)
        image_url, file_type = self._check_image_url(data.image_url, data.file_type)

        certificate = self.store.create_certificate(
            user_id=owner_id,
            title=data.title,
            issuer=data.issuer,
            image_url=image_url,
            description=data.description,
            certificate_type=info.key,
            token_value=info.token_value,
            file_type=file_type,
            is_pdf=file_type == PDF_MEDIA_TYPE,
        )
        logger.info(
            f"Certificate {certificate.id} created by user {owner_id} "
            f"({info.key}, {info.token_value} tokens)"
        )
        return certificate

    def list_certificates(self, owner_id: Optional[int] = None) -> List[Certificate]:
        return self.store.get_certificates(owner_id)

    def get_certificate(self, certificate_id: int) -> Certificate:
        certificate = self.store.get_certificate(certificate_id)
        if certificate is None:
            raise NotFoundError(f"Certificate not found: {certificate_id}")
        return certificate

    def verify_certificate(self, certificate_id: int, acting_user: User) -> VerificationResponse:
        """Verify a certificate and award its tokens to the owner.

        Only administrators may verify. Verifying an already verified
        certificate changes nothing and reports ``awarded=False``.
        """
        if not acting_user.is_admin:
            raise AuthorizationError("Admin access required to verify certificates")

        outcome = self.store.verify_and_award(certificate_id)
        if outcome.awarded:
            logger.info(
                f"Certificate {certificate_id} verified by admin {acting_user.id}: "
                f"awarded {outcome.certificate.token_value} tokens to user {outcome.user.id} "
                f"(balance {outcome.user.total_tokens})"
            )
        else:
            logger.info(
                f"Certificate {certificate_id} already verified; no tokens awarded "
                f"(requested by admin {acting_user.id})"
            )
        return VerificationResponse(
            certificate=outcome.certificate, user=outcome.user, awarded=outcome.awarded
        )

    def check_token_integrity(self, user_id: int) -> TokenIntegrityCheck:
        """Compare a user's recorded balance with their verified certificates."""
        balance = self.store.get_token_balance(user_id)
        return TokenIntegrityCheck(
            status="OK" if balance.calculated_balance == balance.recorded_balance else "MISMATCH",
            user_id=user_id,
            calculated_balance=balance.calculated_balance,
            recorded_balance=balance.recorded_balance,
            verified_certificates=balance.verified_certificates,
            verified_at=datetime.now(timezone.utc),
        )

    def reconcile_tokens(self, user_id: int, acting_user: User) -> TokenIntegrityCheck:
        """Set a drifted balance back to the sum of verified token values.

        The store reads the sum and writes the balance as one unit, so a
        verify running at the same time is never credited twice.
        """
        if not acting_user.is_admin:
            raise AuthorizationError("Admin access required to reconcile balances")

        balance = self.store.reconcile_user_tokens(user_id)
        delta = balance.calculated_balance - balance.recorded_balance
        if delta:
            logger.warning(
                f"Reconciled token balance for user {user_id}: "
                f"{balance.recorded_balance} -> {balance.calculated_balance} (delta {delta})"
            )
        return TokenIntegrityCheck(
            status="OK",
            user_id=user_id,
            calculated_balance=balance.calculated_balance,
            recorded_balance=balance.calculated_balance,
            verified_certificates=balance.verified_certificates,
            adjusted_by=delta,
            verified_at=datetime.now(timezone.utc),
        )
