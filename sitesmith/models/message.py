"""
Message model for the database-backed message store.
"""
from sqlalchemy import Column, DateTime, Integer, JSON, String, Text

from sitesmith.db.base import Base


class MessageRecord(Base):
    """
    A single chat message in a session.

    The generated website bundle of an assistant message is stored as JSON
    exactly as returned by the model; nothing is escaped or rewritten.
    """
    __tablename__ = "messages"
    # Never hand out a deleted row's id again
    __table_args__ = {"sqlite_autoincrement": True}

    id = Column(Integer, primary_key=True, autoincrement=True)

    # Client-chosen partition key, not a foreign key
    session_id = Column(String(255), nullable=False, index=True)

    # "user" or "assistant"
    role = Column(String(20), nullable=False)

    content = Column(Text, nullable=False)

    # {html, css, javascript, title, description} or NULL
    generated_code = Column(JSON, nullable=True)

    created_at = Column(DateTime(timezone=True), nullable=False, index=True)
