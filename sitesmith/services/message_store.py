"""
Message Store - session-partitioned chat log.

Two backends share one contract:
- InMemoryMessageStore: process-local dict guarded by a lock (default)
- SqlMessageStore: relational database via SQLAlchemy

Every public call is atomic with respect to other calls on the same store.
"""
import logging
from abc import ABC, abstractmethod
from datetime import datetime, timezone
from pathlib import Path
from threading import Lock
from typing import Dict, List, Optional

from sqlalchemy import delete, select
from sqlalchemy.engine import Engine, make_url
from sqlalchemy.exc import SQLAlchemyError

from sitesmith.core.config import settings
from sitesmith.core.exceptions import StoreError
from sitesmith.db.base import Base
from sitesmith.db.session import create_db_engine, create_session_factory
from sitesmith.models.message import MessageRecord
from sitesmith.schemas.message import GeneratedWebsite, Message, NewMessage

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class MessageStore(ABC):
    """Contract shared by all message store backends."""

    def create(self, message: NewMessage) -> Message:
        """Assign a fresh id and timestamp, store and return the record."""
        return self.create_many([message])[0]

    @abstractmethod
    def create_many(self, messages: List[NewMessage]) -> List[Message]:
        """Store several messages as one indivisible operation."""

    @abstractmethod
    def list_by_session(self, session_id: str) -> List[Message]:
        """Return a session's messages ordered by (created_at, id)."""

    @abstractmethod
    def get(self, session_id: str, message_id: int) -> Optional[Message]:
        """Return one message of a session, or None."""

    @abstractmethod
    def clear_session(self, session_id: str) -> None:
        """Remove every message of a session. Unknown sessions are a no-op."""

    def close(self) -> None:
        """Release backend resources. Nothing to do for in-process stores."""


# =============================================================================
# In-memory backend
# =============================================================================

class InMemoryMessageStore(MessageStore):
    """
    Keyed in-memory message log.

    Attributes:
        _messages: Message records keyed by id
        _next_id: Next id to hand out; ids start at 1 and never repeat
    """

    def __init__(self):
        self._messages: Dict[int, Message] = {}
        self._next_id = 1
        self._lock = Lock()

    def create_many(self, messages: List[NewMessage]) -> List[Message]:
        with self._lock:
            now = _utcnow()
            created = []
            for new in messages:
                message = Message(
                    **new.model_dump(),
                    id=self._next_id + len(created),
                    created_at=now,
                )
                created.append(message)
            # Insert only after every record is built
            for message in created:
                self._messages[message.id] = message
            self._next_id += len(created)
        return [m.model_copy(deep=True) for m in created]

    def list_by_session(self, session_id: str) -> List[Message]:
        with self._lock:
            found = [m for m in self._messages.values() if m.session_id == session_id]
        found.sort(key=lambda m: (m.created_at, m.id))
        return [m.model_copy(deep=True) for m in found]

    def get(self, session_id: str, message_id: int) -> Optional[Message]:
        with self._lock:
            message = self._messages.get(message_id)
        if message is None or message.session_id != session_id:
            return None
        return message.model_copy(deep=True)

    def clear_session(self, session_id: str) -> None:
        with self._lock:
            message_ids = [
                mid for mid, m in self._messages.items() if m.session_id == session_id
            ]
            for mid in message_ids:
                del self._messages[mid]
        logger.debug(f"Cleared {len(message_ids)} messages for session {session_id}")


# =============================================================================
# SQL backend
# =============================================================================

def _record_to_message(record: MessageRecord) -> Message:
    created_at = record.created_at
    # SQLite drops tzinfo on the way back
    if created_at.tzinfo is None:
        created_at = created_at.replace(tzinfo=timezone.utc)

    return Message(
        id=record.id,
        content=record.content,
        role=record.role,
        session_id=record.session_id,
        generated_code=(
            GeneratedWebsite.model_validate(record.generated_code)
            if record.generated_code is not None
            else None
        ),
        created_at=created_at,
    )


class SqlMessageStore(MessageStore):
    """
    Message store backed by a SQLAlchemy engine.

    Each call runs in its own transaction; failures are rolled back and
    raised as StoreError.
    """

    def __init__(self, engine: Engine):
        self.engine = engine
        self.SessionLocal = create_session_factory(engine)
        Base.metadata.create_all(bind=engine)

    def create_many(self, messages: List[NewMessage]) -> List[Message]:
        db = self.SessionLocal()
        try:
            now = _utcnow()
            records = [
                MessageRecord(
                    session_id=new.session_id,
                    role=new.role,
                    content=new.content,
                    generated_code=(
                        new.generated_code.model_dump()
                        if new.generated_code is not None
                        else None
                    ),
                    created_at=now,
                )
                for new in messages
            ]
            db.add_all(records)
            db.commit()
            for record in records:
                db.refresh(record)
            return [_record_to_message(r) for r in records]
        except SQLAlchemyError as e:
            db.rollback()
            logger.error(f"Failed to save messages: {e}")
            raise StoreError("Failed to save messages", detail=str(e)) from e
        finally:
            db.close()

    def list_by_session(self, session_id: str) -> List[Message]:
        db = self.SessionLocal()
        try:
            records = db.execute(
                select(MessageRecord)
                .where(MessageRecord.session_id == session_id)
                .order_by(MessageRecord.created_at.asc(), MessageRecord.id.asc())
            ).scalars().all()
            return [_record_to_message(r) for r in records]
        except SQLAlchemyError as e:
            logger.error(f"Failed to fetch messages for session {session_id}: {e}")
            raise StoreError("Failed to fetch messages", detail=str(e)) from e
        finally:
            db.close()

    def get(self, session_id: str, message_id: int) -> Optional[Message]:
        db = self.SessionLocal()
        try:
            record = db.execute(
                select(MessageRecord).where(
                    MessageRecord.id == message_id,
                    MessageRecord.session_id == session_id,
                )
            ).scalar_one_or_none()
            return _record_to_message(record) if record is not None else None
        except SQLAlchemyError as e:
            logger.error(f"Failed to fetch message {message_id}: {e}")
            raise StoreError("Failed to fetch message", detail=str(e)) from e
        finally:
            db.close()

    def clear_session(self, session_id: str) -> None:
        db = self.SessionLocal()
        try:
            db.execute(
                delete(MessageRecord).where(MessageRecord.session_id == session_id)
            )
            db.commit()
        except SQLAlchemyError as e:
            db.rollback()
            logger.error(f"Failed to clear messages for session {session_id}: {e}")
            raise StoreError("Failed to clear messages", detail=str(e)) from e
        finally:
            db.close()

    def close(self) -> None:
        self.engine.dispose()


def create_message_store() -> MessageStore:
    """Build the store selected by MESSAGE_STORE."""
    if settings.MESSAGE_STORE == "database":
        url = make_url(settings.DATABASE_URL)
        if url.get_backend_name() == "sqlite" and url.database not in (None, "", ":memory:"):
            Path(url.database).parent.mkdir(parents=True, exist_ok=True)
        logger.info(f"Using database message store ({url.get_backend_name()})")
        return SqlMessageStore(create_db_engine(settings.DATABASE_URL))

    logger.info("Using in-memory message store")
    return InMemoryMessageStore()
