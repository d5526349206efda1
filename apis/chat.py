from fastapi import APIRouter, Depends
from sqlmodel import Session
from database import get_session
from helpers.operations import get_oracle, raise_for_error
from operations.errors import OperationError
from operations.service import process_command
from oracle.base import Oracle
from .schemas.conversations import ChatCommandRequest
from typing import Any, Dict

router = APIRouter(prefix="/chat", tags=["chat"])


@router.post("")
async def chat_command(
    request: ChatCommandRequest,
    db_session: Session = Depends(get_session),
    oracle: Oracle = Depends(get_oracle)
) -> Dict[str, Any]:
    """
    Run one natural-language command against the board.

    The reply is the tagged result of the applied operation, keyed by
    `action`. Failures come back as HTTP errors carrying the message.
    """
    outcome = await process_command(
        db_session,
        oracle,
        request.command,
        request.conversation_id,
        request.board_id
    )

    if isinstance(outcome, OperationError):
        raise_for_error(outcome)

    return outcome.to_payload()
