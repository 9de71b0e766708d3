"""Database model exports."""

from .blog_post import BlogPost
from .message import Message
from .project import Project
from .user import IdentityProvider, User

__all__ = [
    "BlogPost",
    "IdentityProvider",
    "Message",
    "Project",
    "User",
]
