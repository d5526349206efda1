from pydantic import AliasChoices, Field
from typing import Any, Dict, List, Optional
from datetime import datetime
from models.conversations import MessageRole
from .common import CamelSchema


class CreateConversationRequest(CamelSchema):
    """Schema for opening an empty conversation."""
    topic: Optional[str] = Field(default=None, description="Optional topic shown in the sidebar")


class StartConversationRequest(CamelSchema):
    """Schema for opening a conversation seeded with tasks parsed from text."""
    text: str = Field(..., min_length=1, description="Free text describing the work")
    board_id: Optional[str] = Field(default=None, description="Board the new tasks land on")


class ChatCommandRequest(CamelSchema):
    """Schema for one natural-language command."""
    command: str = Field(..., min_length=1, description="What the user typed")
    conversation_id: str = Field(..., description="Conversation the command belongs to")
    board_id: Optional[str] = Field(default=None, description="Active board, if any")


# Response Schemas
class ConversationMessageResponse(CamelSchema):
    id: str = Field(..., description="Message ID")
    sequence: int = Field(..., description="Position within the conversation")
    role: MessageRole = Field(..., description="USER or ASSISTANT")
    content: str = Field(..., description="Message text")
    meta_data: Dict[str, Any] = Field(
        default_factory=dict,
        validation_alias=AliasChoices("meta_data", "metadata"),
        serialization_alias="metadata",
        description="Transcript type and result"
    )
    created_at: datetime = Field(..., description="Creation timestamp")


class ConversationResponse(CamelSchema):
    """Schema for conversation responses."""
    id: str = Field(..., description="Conversation ID")
    topic: Optional[str] = Field(default=None, description="Conversation topic")
    created_at: datetime = Field(..., description="Creation timestamp")


class ConversationDetailResponse(ConversationResponse):
    """Conversation with its transcript in order."""
    messages: List[ConversationMessageResponse] = Field(default_factory=list, description="Transcript")


class ClearMessagesResponse(CamelSchema):
    conversation_id: str = Field(..., description="Conversation whose transcript was cleared")
    cleared_count: int = Field(..., description="Number of messages removed")
