from .base import Base
from .user import User
from .certificate import Certificate
from .engagement import Comment, Like

__all__ = ["Base", "User", "Certificate", "Like", "Comment"]
