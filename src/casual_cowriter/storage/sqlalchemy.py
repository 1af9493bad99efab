"""
SQLAlchemy-based session storage.

Works with any SQLAlchemy-compatible database (PostgreSQL, SQLite, MySQL,
etc.). Sessions and the app config are stored as JSON payloads; a few
columns are duplicated out of the payload for ordering and listing.
"""

import logging
from contextlib import contextmanager
from datetime import datetime
from typing import List, Optional

from sqlalchemy import Column, DateTime, Engine, Integer, String, Text
from sqlalchemy.orm import Session, declarative_base

from casual_cowriter.models import AppConfig, ChatSession

logger = logging.getLogger(__name__)

Base = declarative_base()

APP_CONFIG_KEY = "app_config"


class SessionDB(Base):
    """SQLAlchemy model for chat sessions."""

    __tablename__ = "chat_sessions"

    id = Column(String, primary_key=True)
    title = Column(String, nullable=False)
    updated_at = Column(DateTime, nullable=False, default=datetime.now, index=True)
    total_tokens = Column(Integer, nullable=False, default=0)

    # Full ChatSession (JSON serialized)
    payload_json = Column(Text, nullable=False)

    def to_chat_session(self) -> ChatSession:
        return ChatSession.model_validate_json(self.payload_json)

    @staticmethod
    def from_chat_session(session: ChatSession) -> "SessionDB":
        return SessionDB(
            id=session.id,
            title=session.title,
            updated_at=session.updated_at,
            total_tokens=session.total_tokens,
            payload_json=session.model_dump_json(),
        )


class SettingDB(Base):
    """Key/value settings (JSON serialized)."""

    __tablename__ = "settings"

    key = Column(String, primary_key=True)
    value_json = Column(Text, nullable=False)


class SQLAlchemySessionStore:
    """
    SQLAlchemy-based session storage.

    Example:
        from sqlalchemy import create_engine
        engine = create_engine("sqlite:///cowriter.db")
        store = SQLAlchemySessionStore(engine)
        store.create_tables()
    """

    def __init__(self, engine: Engine):
        """
        Initialize the SQLAlchemy session store.

        Args:
            engine: SQLAlchemy engine for database connection
        """
        self.engine = engine
        logger.info(f"SQLAlchemySessionStore initialized (engine={engine.url})")

    @contextmanager
    def _session(self):
        """Context manager for database sessions with automatic commit/rollback."""
        session = Session(self.engine)
        try:
            yield session
            session.commit()
        except Exception as e:
            session.rollback()
            logger.error(f"Database error: {e}")
            raise
        finally:
            session.close()

    def create_tables(self):
        """Create database tables if they don't exist."""
        Base.metadata.create_all(self.engine)
        logger.info("Database tables created/verified")

    def save_session(self, session: ChatSession) -> str:
        with self._session() as db:
            db.merge(SessionDB.from_chat_session(session))
            logger.debug(f"Saved session {session.id} ({len(session.messages)} messages)")
            return session.id

    def get_sessions(self) -> List[ChatSession]:
        with self._session() as db:
            rows = db.query(SessionDB).order_by(SessionDB.updated_at.desc()).all()
            return [row.to_chat_session() for row in rows]

    def get_session(self, session_id: str) -> Optional[ChatSession]:
        with self._session() as db:
            row = db.query(SessionDB).filter(SessionDB.id == session_id).first()
            if not row:
                return None
            return row.to_chat_session()

    def delete_session(self, session_id: str) -> bool:
        with self._session() as db:
            deleted = db.query(SessionDB).filter(SessionDB.id == session_id).delete()
            if not deleted:
                logger.warning(f"Cannot delete session {session_id}: not found")
                return False

            logger.info(f"Deleted session {session_id}")
            return True

    def save_app_config(self, config: AppConfig) -> None:
        with self._session() as db:
            db.merge(SettingDB(key=APP_CONFIG_KEY, value_json=config.model_dump_json()))

    def get_app_config(self) -> Optional[AppConfig]:
        with self._session() as db:
            row = db.query(SettingDB).filter(SettingDB.key == APP_CONFIG_KEY).first()
            if not row:
                return None
            return AppConfig.model_validate_json(row.value_json)
