"""Database engine and session factories."""

from byit.db.session import AsyncSessionLocal, engine, get_db_context

__all__ = [
    "AsyncSessionLocal",
    "engine",
    "get_db_context",
]
