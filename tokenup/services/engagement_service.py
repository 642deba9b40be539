import logging
from typing import Dict, List

from tokenup.config import Settings
from tokenup.core.exceptions import NotFoundError, ValidationError
from tokenup.schemas.engagement import Comment, CommentWithPoster, Like, LikeStatus
from tokenup.schemas.user import UserSummary
from tokenup.store.base import DataStore

logger = logging.getLogger(__name__)


class EngagementService:
    """Likes and comments on certificates.

    Like/unlike express intent, so repeating either is a no-op. The store
    keeps likes_count and comments_count in step with the rows.
    """

    def __init__(self, store: DataStore, settings: Settings):
        self.store = store
        self.settings = settings

    def like_status(self, user_id: int, certificate_id: int) -> LikeStatus:
        certificate = self.store.get_certificate(certificate_id)
        if certificate is None:
            raise NotFoundError(f"Certificate not found: {certificate_id}")
        return LikeStatus(
            certificate_id=certificate_id,
            liked=self.store.has_liked(user_id, certificate_id),
            likes_count=certificate.likes_count,
        )

    def like(self, user_id: int, certificate_id: int) -> LikeStatus:
        if self.store.like_certificate(user_id, certificate_id):
            logger.info(f"User {user_id} liked certificate {certificate_id}")
        return self.like_status(user_id, certificate_id)

    def unlike(self, user_id: int, certificate_id: int) -> LikeStatus:
        if self.store.unlike_certificate(user_id, certificate_id):
            logger.info(f"User {user_id} unliked certificate {certificate_id}")
        return self.like_status(user_id, certificate_id)

    def has_liked(self, user_id: int, certificate_id: int) -> bool:
        return self.store.has_liked(user_id, certificate_id)

    def get_likes(self, certificate_id: int) -> List[Like]:
        if self.store.get_certificate(certificate_id) is None:
            raise NotFoundError(f"Certificate not found: {certificate_id}")
        return self.store.get_likes(certificate_id)

    def _with_poster(self, comment: Comment, posters: Dict[int, UserSummary]) -> CommentWithPoster:
        poster = posters.get(comment.user_id)
        if poster is None:
            user = self.store.get_user(comment.user_id)
            if user is None:
                raise NotFoundError(f"User not found: {comment.user_id}")
            poster = UserSummary(id=user.id, name=user.name, avatar=user.avatar)
            posters[comment.user_id] = poster
        return CommentWithPoster(**comment.model_dump(), user=poster)

    def comment(self, user_id: int, certificate_id: int, content: str) -> CommentWithPoster:
        """Post a comment and return it with the poster's public summary."""
        content = (content or "").strip()
        if not content:
            raise ValidationError("Comment content cannot be empty")
        if len(content) > self.settings.MAX_COMMENT_LENGTH:
            raise ValidationError(
                f"Comment too long: {len(content)} characters",
                details={"max_length": self.settings.MAX_COMMENT_LENGTH},
            )

        comment = self.store.add_comment(user_id, certificate_id, content)
        logger.info(f"User {user_id} commented on certificate {certificate_id}")
        return self._with_poster(comment, {})

    def list_comments(self, certificate_id: int) -> List[CommentWithPoster]:
        """Comments newest first, each with its poster summary."""
        if self.store.get_certificate(certificate_id) is None:
            raise NotFoundError(f"Certificate not found: {certificate_id}")
        posters: Dict[int, UserSummary] = {}
        return [
            self._with_poster(comment, posters)
            for comment in self.store.get_comments(certificate_id)
        ]
