import logging
from contextlib import contextmanager
from typing import Iterator, List, Optional

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from tokenup.core.exceptions import (
    BaseAPIException,
    ConflictError,
    InternalServerError,
    NotFoundError,
    ValidationError,
)
from tokenup.repositories import (
    CertificateRepository,
    CommentRepository,
    LikeRepository,
    UserRepository,
)
from tokenup.schemas.analytics import TokenBalance
from tokenup.schemas.certificate import Certificate, VerificationOutcome
from tokenup.schemas.engagement import Comment, Like
from tokenup.schemas.user import User
from tokenup.store.base import DataStore

logger = logging.getLogger(__name__)


class SqlDataStore(DataStore):
    """Relational store over one SQLAlchemy session.

    Each public write is one transaction: counters and balances change through
    atomic column updates, and a failure anywhere in the unit rolls back the
    whole unit.
    """

    name = "sql"

    def __init__(self, db: Session):
        self.db = db
        self.users = UserRepository(db)
        self.certificates = CertificateRepository(db)
        self.likes = LikeRepository(db)
        self.comments = CommentRepository(db)

    @contextmanager
    def _transaction(self) -> Iterator[None]:
        try:
            yield
            self.db.commit()
        except BaseAPIException:
            self.db.rollback()
            raise
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Storage operation failed: {str(e)}")
            raise InternalServerError("Storage operation failed") from e

    def _require_user(self, user_id: int) -> User:
        user = self.users.get_by_id(user_id)
        if user is None:
            raise NotFoundError(f"User not found: {user_id}")
        return user

    def _require_certificate(self, certificate_id: int) -> Certificate:
        certificate = self.certificates.get_by_id(certificate_id)
        if certificate is None:
            raise NotFoundError(f"Certificate not found: {certificate_id}")
        return certificate

    # ------------------------------------------------------------------ users

    def get_user(self, user_id: int) -> Optional[User]:
        return self.users.get_by_id(user_id)

    def get_user_by_username(self, username: str) -> Optional[User]:
        return self.users.get_by_username(username)

    def create_user(
        self,
        username: str,
        password_hash: str,
        name: str,
        avatar: Optional[str] = None,
        bio: Optional[str] = None,
    ) -> User:
        with self._transaction():
            if self.users.username_exists(username):
                raise ConflictError(f"Username already taken: {username}")
            try:
                return self.users.create_user(
                    username=username,
                    password_hash=password_hash,
                    name=name,
                    avatar=avatar,
                    bio=bio,
                    commit=False,
                )
            except IntegrityError:
                # lost a race against a concurrent registration
                raise ConflictError(f"Username already taken: {username}")

    def list_users(self) -> List[User]:
        return self.users.list_all()

    def _apply_token_delta(self, user_id: int, delta: int) -> User:
        if self.users.increment_tokens(user_id, delta) == 0:
            user = self._require_user(user_id)
            raise ValidationError(
                f"Token balance cannot go negative. Current: {user.total_tokens}, delta: {delta}"
            )
        return self._require_user(user_id)

    def update_user_tokens(self, user_id: int, delta: int) -> User:
        with self._transaction():
            return self._apply_token_delta(user_id, delta)

    def get_top_users(self, limit: int) -> List[User]:
        return self.users.get_top_users(max(limit, 0))

    def make_user_admin(self, user_id: int) -> User:
        with self._transaction():
            user = self.users.set_admin(user_id, commit=False)
            if user is None:
                raise NotFoundError(f"User not found: {user_id}")
            return user

    def update_user_avatar(self, user_id: int, avatar: str) -> User:
        with self._transaction():
            user = self.users.set_avatar(user_id, avatar, commit=False)
            if user is None:
                raise NotFoundError(f"User not found: {user_id}")
            return user

    # ----------------------------------------------------------- certificates

    def get_certificate(self, certificate_id: int) -> Optional[Certificate]:
        return self.certificates.get_by_id(certificate_id)

    def get_certificates(self, user_id: Optional[int] = None) -> List[Certificate]:
        return self.certificates.list_newest_first(user_id)

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
        with self._transaction():
            self._require_user(user_id)
            return self.certificates.create(
                commit=False,
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
            )

    def verify_certificate(self, certificate_id: int) -> Certificate:
        with self._transaction():
            self._require_certificate(certificate_id)
            self.certificates.mark_verified_if_pending(certificate_id)
            return self._require_certificate(certificate_id)

    def verify_and_award(self, certificate_id: int) -> VerificationOutcome:
        with self._transaction():
            certificate = self._require_certificate(certificate_id)
            awarded = self.certificates.mark_verified_if_pending(certificate_id)
            if awarded:
                owner = self._apply_token_delta(certificate.user_id, certificate.token_value)
            else:
                owner = self._require_user(certificate.user_id)
            return VerificationOutcome(
                certificate=self._require_certificate(certificate_id),
                user=owner,
                awarded=awarded,
            )

    def sum_verified_tokens(self, user_id: int) -> int:
        return self.certificates.sum_verified_tokens(user_id)

    def _balance_snapshot(self, user_id: int) -> TokenBalance:
        row = self.users.balance_snapshot(
            user_id,
            self.certificates.verified_sum_subquery(user_id).label("verified_sum"),
            self.certificates.verified_count_subquery(user_id).label("verified_count"),
        )
        if row is None:
            raise NotFoundError(f"User not found: {user_id}")
        recorded, calculated, count = row
        return TokenBalance(
            user_id=user_id,
            recorded_balance=recorded,
            calculated_balance=int(calculated or 0),
            verified_certificates=int(count or 0),
        )

    def get_token_balance(self, user_id: int) -> TokenBalance:
        return self._balance_snapshot(user_id)

    def reconcile_user_tokens(self, user_id: int) -> TokenBalance:
        with self._transaction():
            previous = self.users.lock_balance(user_id)
            if previous is None:
                raise NotFoundError(f"User not found: {user_id}")
            # verified sum and write in one statement; a verify awarding after
            # this point waits on the user row and adds on top
            self.users.set_tokens(user_id, self.certificates.verified_sum_subquery(user_id))
            written = self._balance_snapshot(user_id)
            return written.model_copy(
                update={
                    "recorded_balance": previous,
                    "calculated_balance": written.recorded_balance,
                }
            )

    # ------------------------------------------------------------- engagement

    def like_certificate(self, user_id: int, certificate_id: int) -> bool:
        with self._transaction():
            self._require_user(user_id)
            self._require_certificate(certificate_id)
            if self.likes.find(user_id, certificate_id) is not None:
                return False
            try:
                self.likes.insert(user_id, certificate_id)
            except IntegrityError:
                # a concurrent request inserted the same pair first; nothing
                # else was written in this unit yet
                self.db.rollback()
                return False
            self.certificates.adjust_counter(certificate_id, "likes_count", 1)
            return True

    def unlike_certificate(self, user_id: int, certificate_id: int) -> bool:
        with self._transaction():
            self._require_certificate(certificate_id)
            if self.likes.delete_pair(user_id, certificate_id) == 0:
                return False
            self.certificates.adjust_counter(certificate_id, "likes_count", -1)
            return True

    def get_likes(self, certificate_id: int) -> List[Like]:
        return self.likes.list_for_certificate(certificate_id)

    def has_liked(self, user_id: int, certificate_id: int) -> bool:
        return self.likes.find(user_id, certificate_id) is not None

    def add_comment(self, user_id: int, certificate_id: int, content: str) -> Comment:
        with self._transaction():
            self._require_user(user_id)
            self._require_certificate(certificate_id)
            comment = self.comments.create(
                commit=False,
                user_id=user_id,
                certificate_id=certificate_id,
                content=content,
            )
            self.certificates.adjust_counter(certificate_id, "comments_count", 1)
            return comment

    def get_comments(self, certificate_id: int) -> List[Comment]:
        return self.comments.list_for_certificate(certificate_id)
