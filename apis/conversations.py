from fastapi import APIRouter, Depends, HTTPException, status
from sqlmodel import Session, select
from database import get_session, transaction
from helpers.operations import get_oracle, raise_for_error
from models.conversations import Conversation, ConversationMessage, TOPIC_MAX_LENGTH
from operations.errors import OperationError
from operations.service import start_conversation_from_text
from oracle.base import Oracle
from settings import logger
from .schemas.conversations import (
    ClearMessagesResponse, ConversationDetailResponse, ConversationMessageResponse, ConversationResponse,
    CreateConversationRequest, StartConversationRequest
)
from typing import Any, Dict, List

router = APIRouter(prefix="/conversations", tags=["conversations"])


def get_conversation_or_404(db_session: Session, conversation_id: str) -> Conversation:
    conversation = db_session.exec(select(Conversation).where(Conversation.id == conversation_id)).first()
    if not conversation:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Conversation not found"
        )
    return conversation


def build_conversation_detail(db_session: Session, conversation: Conversation) -> ConversationDetailResponse:
    messages = db_session.exec(
        select(ConversationMessage)
        .where(ConversationMessage.conversation_id == conversation.id)
        .order_by(ConversationMessage.sequence)
    ).all()

    return ConversationDetailResponse(
        id=conversation.id,
        topic=conversation.topic,
        created_at=conversation.created_at,
        messages=[ConversationMessageResponse.model_validate(message) for message in messages]
    )


@router.get("")
async def list_conversations(
    db_session: Session = Depends(get_session)
) -> List[ConversationResponse]:
    """List conversations, newest first."""
    conversations = db_session.exec(select(Conversation).order_by(Conversation.created_at.desc())).all()
    return [ConversationResponse.model_validate(conversation) for conversation in conversations]


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_conversation(
    conversation_data: CreateConversationRequest,
    db_session: Session = Depends(get_session)
) -> ConversationResponse:
    """Open an empty conversation."""
    topic = (conversation_data.topic or "")[:TOPIC_MAX_LENGTH] or None

    with transaction(db_session):
        conversation = Conversation(topic=topic)
        db_session.add(conversation)

    db_session.refresh(conversation)
    logger.info("Conversation created", extra={"conversation_id": conversation.id})

    return ConversationResponse.model_validate(conversation)


@router.post("/from-text", status_code=status.HTTP_201_CREATED)
async def create_conversation_from_text(
    request: StartConversationRequest,
    db_session: Session = Depends(get_session),
    oracle: Oracle = Depends(get_oracle)
) -> Dict[str, Any]:
    """Open a conversation seeded with the tasks found in a block of text."""
    outcome = await start_conversation_from_text(db_session, oracle, request.text, request.board_id)

    if isinstance(outcome, OperationError):
        raise_for_error(outcome)

    return outcome.to_payload()


@router.get("/{conversation_id}")
async def get_conversation(
    conversation_id: str,
    db_session: Session = Depends(get_session)
) -> ConversationDetailResponse:
    """Get a conversation with its transcript in order."""
    conversation = get_conversation_or_404(db_session, conversation_id)
    return build_conversation_detail(db_session, conversation)


@router.delete("/{conversation_id}/messages")
async def clear_conversation_messages(
    conversation_id: str,
    db_session: Session = Depends(get_session)
) -> ClearMessagesResponse:
    """Clear the transcript; the conversation and its tasks stay."""
    get_conversation_or_404(db_session, conversation_id)

    with transaction(db_session):
        messages = db_session.exec(
            select(ConversationMessage).where(ConversationMessage.conversation_id == conversation_id)
        ).all()
        for message in messages:
            db_session.delete(message)

    return ClearMessagesResponse(conversation_id=conversation_id, cleared_count=len(messages))
