# Pydantic schemas shared by stores, services and routers

from .user import User, UserSummary
from .certificate import Certificate, CertificateCreate, VerificationOutcome
from .engagement import Comment, CommentWithPoster, Like, LikeStatus

__all__ = [
    "User",
    "UserSummary",
    "Certificate",
    "CertificateCreate",
    "VerificationOutcome",
    "Comment",
    "CommentWithPoster",
    "Like",
    "LikeStatus",
]
