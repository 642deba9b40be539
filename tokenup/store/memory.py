import logging
import threading
from datetime import datetime, timezone
from typing import Dict, List, Optional, Tuple

from tokenup.core.exceptions import ConflictError, NotFoundError, ValidationError
from tokenup.schemas.analytics import TokenBalance
from tokenup.schemas.certificate import Certificate, VerificationOutcome
from tokenup.schemas.engagement import Comment, Like
from tokenup.schemas.user import User
from tokenup.store.base import DataStore

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _newest_first(items):
    return sorted(items, key=lambda item: (item.created_at, item.id), reverse=True)


class MemoryDataStore(DataStore):
    """Process-local store guarded by a single re-entrant lock.

    Every mutation and every compound read runs under ``self._lock`` so the
    counters can never drift from the rows they denormalize. Values handed
    out are copies; callers cannot mutate stored state.
    """

    name = "memory"

    def __init__(self) -> None:
        self._lock = threading.RLock()
        self._users: Dict[int, User] = {}
        self._certificates: Dict[int, Certificate] = {}
        self._likes: Dict[Tuple[int, int], Like] = {}
        self._comments: Dict[int, Comment] = {}
        self._next_user_id = 1
        self._next_certificate_id = 1
        self._next_like_id = 1
        self._next_comment_id = 1

    # ------------------------------------------------------------------ users

    def _require_user(self, user_id: int) -> User:
        user = self._users.get(user_id)
        if user is None:
            raise NotFoundError(f"User not found: {user_id}")
        return user

    def _require_certificate(self, certificate_id: int) -> Certificate:
        certificate = self._certificates.get(certificate_id)
        if certificate is None:
            raise NotFoundError(f"Certificate not found: {certificate_id}")
        return certificate

    def get_user(self, user_id: int) -> Optional[User]:
        with self._lock:
            user = self._users.get(user_id)
            return user.model_copy() if user else None

    def get_user_by_username(self, username: str) -> Optional[User]:
        with self._lock:
            for user in self._users.values():
                if user.username == username:
                    return user.model_copy()
            return None

    def create_user(
        self,
        username: str,
        password_hash: str,
        name: str,
        avatar: Optional[str] = None,
        bio: Optional[str] = None,
    ) -> User:
        with self._lock:
            if any(u.username == username for u in self._users.values()):
                raise ConflictError(f"Username already taken: {username}")
            user = User(
                id=self._next_user_id,
                username=username,
                password_hash=password_hash,
                name=name,
                avatar=avatar,
                bio=bio,
                total_tokens=0,
                is_admin=False,
                created_at=_utcnow(),
            )
            self._next_user_id += 1
            self._users[user.id] = user
            return user.model_copy()

    def list_users(self) -> List[User]:
        with self._lock:
            return [u.model_copy() for u in sorted(self._users.values(), key=lambda u: u.id)]

    def update_user_tokens(self, user_id: int, delta: int) -> User:
        with self._lock:
            user = self._require_user(user_id)
            new_balance = user.total_tokens + delta
            if new_balance < 0:
                raise ValidationError(
                    f"Token balance cannot go negative. Current: {user.total_tokens}, delta: {delta}"
                )
            updated = user.model_copy(update={"total_tokens": new_balance})
            self._users[user_id] = updated
            return updated.model_copy()

    def get_top_users(self, limit: int) -> List[User]:
        with self._lock:
            ranked = sorted(self._users.values(), key=lambda u: (-u.total_tokens, u.id))
            return [u.model_copy() for u in ranked[: max(limit, 0)]]

    def make_user_admin(self, user_id: int) -> User:
        with self._lock:
            updated = self._require_user(user_id).model_copy(update={"is_admin": True})
            self._users[user_id] = updated
            return updated.model_copy()

    def update_user_avatar(self, user_id: int, avatar: str) -> User:
        with self._lock:
            updated = self._require_user(user_id).model_copy(update={"avatar": avatar})
            self._users[user_id] = updated
            return updated.model_copy()

    # ----------------------------------------------------------- certificates

    def get_certificate(self, certificate_id: int) -> Optional[Certificate]:
        with self._lock:
            certificate = self._certificates.get(certificate_id)
            return certificate.model_copy() if certificate else None

    def get_certificates(self, user_id: Optional[int] = None) -> List[Certificate]:
        with self._lock:
            certificates = [
                c
                for c in self._certificates.values()
                if user_id is None or c.user_id == user_id
            ]
            return [c.model_copy() for c in _newest_first(certificates)]

    def create_certificate(
        self,
        user_id: int,
        title: str,
        issuer: str,
        image_url: str,
        certificate_type: str,
        token_value: int,
        description: Optional[str] = None,
        file_type: str = "image/jpeg",
        is_pdf: bool = False,
    ) -> Certificate:
        with self._lock:
            self._require_user(user_id)
            certificate = Certificate(
                id=self._next_certificate_id,
                user_id=user_id,
                title=title,
                issuer=issuer,
                image_url=image_url,
                description=description,
                certificate_type=certificate_type,
                token_value=token_value,
                is_verified=False,
                likes_count=0,
                comments_count=0,
                file_type=file_type,
                is_pdf=is_pdf,
                created_at=_utcnow(),
            )
            self._next_certificate_id += 1
            self._certificates[certificate.id] = certificate
            return certificate.model_copy()

    def _mark_verified(self, certificate: Certificate) -> Certificate:
        updated = certificate.model_copy(
            update={"is_verified": True, "verified_at": _utcnow()}
        )
        self._certificates[certificate.id] = updated
        return updated

    def verify_certificate(self, certificate_id: int) -> Certificate:
        with self._lock:
            certificate = self._require_certificate(certificate_id)
            if not certificate.is_verified:
                certificate = self._mark_verified(certificate)
            return certificate.model_copy()

    def verify_and_award(self, certificate_id: int) -> VerificationOutcome:
        with self._lock:
            certificate = self._require_certificate(certificate_id)
            owner = self._require_user(certificate.user_id)
            if certificate.is_verified:
                return VerificationOutcome(
                    certificate=certificate.model_copy(),
                    user=owner.model_copy(),
                    awarded=False,
                )
            certificate = self._mark_verified(certificate)
            owner = self.update_user_tokens(owner.id, certificate.token_value)
            return VerificationOutcome(
                certificate=certificate.model_copy(), user=owner, awarded=True
            )

    def sum_verified_tokens(self, user_id: int) -> int:
        with self._lock:
            return sum(
                c.token_value
                for c in self._certificates.values()
                if c.user_id == user_id and c.is_verified
            )

    def get_token_balance(self, user_id: int) -> TokenBalance:
        with self._lock:
            user = self._require_user(user_id)
            verified = [
                c
                for c in self._certificates.values()
                if c.user_id == user_id and c.is_verified
            ]
            return TokenBalance(
                user_id=user_id,
                recorded_balance=user.total_tokens,
                calculated_balance=sum(c.token_value for c in verified),
                verified_certificates=len(verified),
            )

    def reconcile_user_tokens(self, user_id: int) -> TokenBalance:
        with self._lock:
            balance = self.get_token_balance(user_id)
            self._users[user_id] = self._users[user_id].model_copy(
                update={"total_tokens": balance.calculated_balance}
            )
            return balance

    # ------------------------------------------------------------- engagement

    def _bump_counter(self, certificate_id: int, field: str, delta: int) -> None:
        certificate = self._certificates[certificate_id]
        value = max(0, getattr(certificate, field) + delta)
        self._certificates[certificate_id] = certificate.model_copy(update={field: value})

    def like_certificate(self, user_id: int, certificate_id: int) -> bool:
        with self._lock:
            self._require_user(user_id)
            self._require_certificate(certificate_id)
            key = (user_id, certificate_id)
            if key in self._likes:
                return False
            self._likes[key] = Like(
                id=self._next_like_id,
                user_id=user_id,
                certificate_id=certificate_id,
                created_at=_utcnow(),
            )
            self._next_like_id += 1
            self._bump_counter(certificate_id, "likes_count", 1)
            return True

    def unlike_certificate(self, user_id: int, certificate_id: int) -> bool:
        with self._lock:
            self._require_certificate(certificate_id)
            if self._likes.pop((user_id, certificate_id), None) is None:
                return False
            self._bump_counter(certificate_id, "likes_count", -1)
            return True

    def get_likes(self, certificate_id: int) -> List[Like]:
        with self._lock:
            likes = [l for l in self._likes.values() if l.certificate_id == certificate_id]
            return [l.model_copy() for l in sorted(likes, key=lambda l: l.id)]

    def has_liked(self, user_id: int, certificate_id: int) -> bool:
        with self._lock:
            return (user_id, certificate_id) in self._likes

    def add_comment(self, user_id: int, certificate_id: int, content: str) -> Comment:
        with self._lock:
            self._require_user(user_id)
            self._require_certificate(certificate_id)
            comment = Comment(
                id=self._next_comment_id,
                user_id=user_id,
                certificate_id=certificate_id,
                content=content,
                created_at=_utcnow(),
            )
            self._next_comment_id += 1
            self._comments[comment.id] = comment
            self._bump_counter(certificate_id, "comments_count", 1)
            return comment.model_copy()

    def get_comments(self, certificate_id: int) -> List[Comment]:
        with self._lock:
            comments = [
                c for c in self._comments.values() if c.certificate_id == certificate_id
            ]
            return [c.model_copy() for c in _newest_first(comments)]
