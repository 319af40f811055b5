"""Domain services for Monte-Log.

Each service receives its database and cache handles at construction.
"""

from montelog.services.auth import AuthService, SessionUnavailableError
from montelog.services.categories import CategoryService
from montelog.services.likes import LikeService
from montelog.services.posts import PostService
from montelog.services.visitors import VisitorService, utc_today

__all__ = [
    "AuthService",
    "CategoryService",
    "LikeService",
    "PostService",
    "SessionUnavailableError",
    "VisitorService",
    "utc_today",
]
