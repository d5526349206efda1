from typing import Any, Dict, Optional, Tuple
from sqlalchemy import func
from sqlmodel import Session, select
from models.conversations import Conversation, ConversationMessage, MessageRole
from .contract import PROMPT_VERSION, TRANSCRIPT_TYPES, OperationName
from .errors import NotFound


def require_conversation(db_session: Session, conversation_id: str) -> Conversation:
    conversation = db_session.exec(
        select(Conversation).where(Conversation.id == conversation_id)
    ).first()
    if not conversation:
        raise NotFound("Conversation not found.", conversation_id=conversation_id)
    return conversation


def next_sequence(db_session: Session, conversation_id: str) -> int:
    highest = db_session.exec(
        select(func.max(ConversationMessage.sequence)).where(
            ConversationMessage.conversation_id == conversation_id
        )
    ).one()
    return 0 if highest is None else highest + 1


def append_exchange(
    db_session: Session,
    conversation_id: str,
    transcript_type: str,
    command: str,
    reply: str,
    result: Optional[Dict[str, Any]] = None
) -> Tuple[ConversationMessage, ConversationMessage]:
    """
    Add the USER command and the ASSISTANT reply to the transcript.

    Both rows are only added to the session; the caller's transaction decides
    whether they persist together with the state change they describe.
    """
    sequence = next_sequence(db_session, conversation_id)

    response_metadata: Dict[str, Any] = {
        "type": f"{transcript_type}-response",
        "promptVersion": PROMPT_VERSION,
    }
    if result is not None:
        response_metadata["result"] = result

    user_message = ConversationMessage(
        conversation_id=conversation_id,
        sequence=sequence,
        role=MessageRole.USER,
        content=command,
        meta_data={
            "type": f"{transcript_type}-request",
            "promptVersion": PROMPT_VERSION,
        }
    )
    assistant_message = ConversationMessage(
        conversation_id=conversation_id,
        sequence=sequence + 1,
        role=MessageRole.ASSISTANT,
        content=reply,
        meta_data=response_metadata
    )

    db_session.add_all([user_message, assistant_message])
    return user_message, assistant_message


def record_operation(
    db_session: Session,
    conversation_id: str,
    operation: OperationName,
    command: str,
    reply: str,
    result: Dict[str, Any]
) -> Tuple[ConversationMessage, ConversationMessage]:
    return append_exchange(
        db_session, conversation_id, TRANSCRIPT_TYPES[operation], command, reply, result
    )
