"""Persistence layer for Monte-Log.

Provides:
- SQLAlchemy ORM models for members, categories, posts, likes and visits
- Database: explicitly constructed engine + session factory
- Repository classes for each table
"""

from montelog.persistence.db import Database, create_engine_from_settings
from montelog.persistence.repositories import (
    CategoryRepository,
    LikeRepository,
    MemberRepository,
    PostRepository,
    VisitorRepository,
)
from montelog.persistence.tables import (
    Base,
    CategoryTable,
    MemberTable,
    PostLikeTable,
    PostTable,
    VisitorTable,
)

__all__ = [
    "Base",
    "CategoryRepository",
    "CategoryTable",
    "Database",
    "LikeRepository",
    "MemberRepository",
    "MemberTable",
    "PostLikeTable",
    "PostRepository",
    "PostTable",
    "VisitorRepository",
    "VisitorTable",
    "create_engine_from_settings",
]
