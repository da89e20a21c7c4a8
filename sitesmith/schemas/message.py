"""
Message and generated-website schemas.

JSON on the wire uses camelCase (``sessionId``, ``generatedCode``); Python
attributes stay snake_case. Models accept either form on input.
"""
from datetime import datetime
from typing import Literal, Optional

from pydantic import BaseModel, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Base model serialised with camelCase field names."""

    class Config:
        alias_generator = to_camel
        populate_by_name = True
        from_attributes = True


# =============================================================================
# Generated Website
# =============================================================================

class GeneratedWebsite(CamelModel):
    """HTML/CSS/JavaScript bundle attached to an assistant message."""
    html: str
    css: str
    javascript: str
    title: str
    description: str


# =============================================================================
# Message Schemas
# =============================================================================

Role = Literal["user", "assistant"]


class NewMessage(CamelModel):
    """A message not yet persisted; the store assigns id and created_at."""
    content: str
    role: Role
    session_id: str
    generated_code: Optional[GeneratedWebsite] = None


class Message(NewMessage):
    """A persisted chat message."""
    id: int
    created_at: datetime


# =============================================================================
# Request / Response Schemas
# =============================================================================

class GenerateRequest(CamelModel):
    """Request schema for generating a website."""
    prompt: str = Field(..., min_length=1)
    session_id: str = Field(..., min_length=1)


class GenerateResponse(CamelModel):
    """Both persisted messages plus the generated bundle."""
    user_message: Message
    ai_message: Message
    generated_code: GeneratedWebsite


class StatusMessage(BaseModel):
    message: str
