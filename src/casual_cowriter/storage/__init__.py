"""
Session storage.

Provides the SessionStore protocol with in-memory and SQLAlchemy backends.
"""

from casual_cowriter.storage.memory import InMemorySessionStore
from casual_cowriter.storage.protocols import SessionStore

__all__ = [
    "InMemorySessionStore",
    "SessionStore",
]

try:
    from casual_cowriter.storage.sqlalchemy import SQLAlchemySessionStore  # noqa: F401

    __all__.append("SQLAlchemySessionStore")
except ImportError:
    pass
