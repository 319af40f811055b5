"""Cache key schema for Monte-Log.

The first four layouts are shared with the previous deployment and must not
change:

- posts_page_{page}            - serialized post summaries for a listing page
- total_post_count             - exact number of posts
- categories                   - serialized category list
- visitor:{user_key}:{date}    - once-per-day visit gate (ISO date, UTC)

Sessions live under session:{session_id}.
"""

from __future__ import annotations

from datetime import date


class CacheKeys:
    """Cache key generator following the deployed naming convention."""

    TOTAL_POST_COUNT = "total_post_count"
    CATEGORIES = "categories"
    VISITOR_PREFIX = "visitor"
    SESSION_PREFIX = "session"

    @classmethod
    def posts_page(cls, page: int) -> str:
        """Key for a cached post listing page."""
        return f"posts_page_{page}"

    @classmethod
    def total_post_count(cls) -> str:
        return cls.TOTAL_POST_COUNT

    @classmethod
    def categories(cls) -> str:
        return cls.CATEGORIES

    @classmethod
    def visitor_gate(cls, user_key: str, visited: date) -> str:
        """Key for the daily visit gate of a user key."""
        return f"{cls.VISITOR_PREFIX}:{user_key}:{visited.isoformat()}"

    @classmethod
    def visitor_gate_pattern(cls) -> str:
        """SCAN pattern matching every visit gate."""
        return f"{cls.VISITOR_PREFIX}:*"

    @classmethod
    def session(cls, session_id: str) -> str:
        return f"{cls.SESSION_PREFIX}:{session_id}"

    @classmethod
    def parse_visitor_gate(cls, key: str) -> tuple[str, date] | None:
        """Split a visit gate key into (user_key, date).

        The user key may itself contain colons (IPv6 addresses, user agents),
        so the date is taken from the last segment. Returns None if the key
        is not a visit gate.
        """
        prefix = f"{cls.VISITOR_PREFIX}:"
        if not key.startswith(prefix):
            return None

        user_key, sep, raw_date = key[len(prefix) :].rpartition(":")
        if not sep or not user_key:
            return None

        try:
            return user_key, date.fromisoformat(raw_date)
        except ValueError:
            return None
