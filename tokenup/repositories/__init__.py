# Repository layer - Data access with Pydantic responses

from .base import BaseRepository
from .user_repository import UserRepository
from .certificate_repository import CertificateRepository
from .engagement_repository import CommentRepository, LikeRepository

__all__ = [
    "BaseRepository",
    "UserRepository",
    "CertificateRepository",
    "LikeRepository",
    "CommentRepository",
]
