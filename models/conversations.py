from sqlmodel import SQLModel, Field, Column, UniqueConstraint
from sqlalchemy import JSON
from enum import Enum
from typing import Optional, Dict, Any
from datetime import datetime
from .helper import id_generator, utcnow

TOPIC_MAX_LENGTH = 120


class MessageRole(str, Enum):
    """Transcript message authors."""
    USER = "USER"
    ASSISTANT = "ASSISTANT"


class Conversation(SQLModel, table=True):
    """Chat thread whose commands drive the board."""
    id: str = Field(default_factory=id_generator('conversation', 10), primary_key=True)
    topic: Optional[str] = Field(default=None)
    created_at: datetime = Field(default_factory=utcnow, index=True)


class ConversationMessage(SQLModel, table=True):
    """One transcript entry; written in USER/ASSISTANT pairs."""
    __table_args__ = (
        UniqueConstraint('conversation_id', 'sequence', name='uq_conversation_message_sequence'),
    )

    id: str = Field(default_factory=id_generator('message', 10), primary_key=True)
    conversation_id: str = Field(foreign_key="conversation.id", index=True)
    sequence: int = Field(index=True)
    role: MessageRole
    content: str
    meta_data: Dict[str, Any] = Field(default_factory=dict, sa_column=Column(JSON))
    created_at: datetime = Field(default_factory=utcnow, index=True)


def derive_topic(text: str) -> Optional[str]:
    """First non-empty line of the text, truncated for display."""
    trimmed = text.strip()
    if not trimmed:
        return None
    first_line = trimmed.splitlines()[0].strip()
    return first_line[:TOPIC_MAX_LENGTH] or None
