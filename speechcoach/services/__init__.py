"""
Services module for the Speech Coach Scoring Engine.
"""

from speechcoach.services.snowflake import get_snowflake_connection


def get_scoring_service():
    """Lazy import to avoid circular dependency."""
    from speechcoach.core.dependencies import get_scoring_service as _get
    return _get()


__all__ = [
    "get_scoring_service",
    "get_snowflake_connection",
]
