"""
Data store contract.

Every operation the services rely on is abstract, so a backend that leaves
one out fails at construction time instead of at the first request. All
operations return pydantic schemas, never ORM rows.

Counter coupling: like/unlike/add_comment adjust the parent certificate's
denormalized counter inside the same critical section as the row change.
"""

from abc import ABC, abstractmethod
from typing import List, Optional

from tokenup.schemas.analytics import TokenBalance
from tokenup.schemas.certificate import Certificate, VerificationOutcome
from tokenup.schemas.engagement import Comment, Like
from tokenup.schemas.user import User


class DataStore(ABC):
    """Storage for users, certificates, likes and comments"""

    name: str = "abstract"

    # ------------------------------------------------------------------ users

    @abstractmethod
    def get_user(self, user_id: int) -> Optional[User]: ...

    @abstractmethod
    def get_user_by_username(self, username: str) -> Optional[User]: ...

    @abstractmethod
    def create_user(
        self,
        username: str,
        password_hash: str,
        name: str,
        avatar: Optional[str] = None,
        bio: Optional[str] = None,
    ) -> User:
        """Create a user with total_tokens=0 and is_admin=False.

        Raises ConflictError when the username is taken.
        """

    @abstractmethod
    def list_users(self) -> List[User]:
        """All users in insertion order"""

    @abstractmethod
    def update_user_tokens(self, user_id: int, delta: int) -> User:
        """Atomically add ``delta`` to the user's balance.

        Raises NotFoundError for an unknown user and ValidationError when the
        resulting balance would be negative.
        """

    @abstractmethod
    def get_top_users(self, limit: int) -> List[User]:
        """Users by total_tokens descending, ties broken by id ascending"""

    @abstractmethod
    def make_user_admin(self, user_id: int) -> User: ...

    @abstractmethod
    def update_user_avatar(self, user_id: int, avatar: str) -> User: ...

    # ----------------------------------------------------------- certificates

    @abstractmethod
    def get_certificate(self, certificate_id: int) -> Optional[Certificate]: ...

    @abstractmethod
    def get_certificates(self, user_id: Optional[int] = None) -> List[Certificate]:
        """All certificates, or one owner's, newest first"""

    @abstractmethod
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
    ) -> Certificate: ...

    @abstractmethod
    def verify_certificate(self, certificate_id: int) -> Certificate:
        """Set is_verified; never clears it. Does not touch balances."""

    @abstractmethod
    def verify_and_award(self, certificate_id: int) -> VerificationOutcome:
        """Transition pending -> verified and credit the owner in one unit.

        When the certificate is already verified nothing is written and the
        outcome carries ``awarded=False``.
        """

    @abstractmethod
    def sum_verified_tokens(self, user_id: int) -> int:
        """Sum of token_value over the user's verified certificates"""

    @abstractmethod
    def get_token_balance(self, user_id: int) -> TokenBalance:
        """Recorded balance, verified sum and verified count read as one unit.

        Raises NotFoundError for an unknown user.
        """

    @abstractmethod
    def reconcile_user_tokens(self, user_id: int) -> TokenBalance:
        """Set the balance to the verified sum in one unit.

        The result carries the balance found before the write as
        recorded_balance and the balance written as calculated_balance. A
        verify racing with this call is either fully counted in the sum or
        applies its award on top of the written balance, never both.
        """

    # ------------------------------------------------------------- engagement

    @abstractmethod
    def like_certificate(self, user_id: int, certificate_id: int) -> bool:
        """Create the like if absent. Returns True when a row was created."""

    @abstractmethod
    def unlike_certificate(self, user_id: int, certificate_id: int) -> bool:
        """Remove the like if present. Returns True when a row was removed."""

    @abstractmethod
    def get_likes(self, certificate_id: int) -> List[Like]: ...

    @abstractmethod
    def has_liked(self, user_id: int, certificate_id: int) -> bool: ...

    @abstractmethod
    def add_comment(self, user_id: int, certificate_id: int, content: str) -> Comment: ...

    @abstractmethod
    def get_comments(self, certificate_id: int) -> List[Comment]:
        """Comments on a certificate, newest first"""
