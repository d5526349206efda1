"""
Inbound entry points: command string in, tagged result or error out.
"""

from typing import List, Optional, Union
from sqlalchemy.exc import IntegrityError
from sqlmodel import Session
from database import transaction
from models.conversations import Conversation, derive_topic
from oracle.adapter import propose_operation
from oracle.base import Oracle
from settings import logger
from .contract import OperationName, TaskSpec
from .dispatcher import dispatch
from .errors import Conflict, ContractViolation, OperationError, OperationFailure
from .results import OperationResult, ResultModel
from .sequence import next_case_number
from .task_operations import persist_task_creation
from .validator import validate_operation


class ConversationStartResult(ResultModel):
    tasks: List[TaskSpec]
    conversation_id: str
    board_id: Optional[str] = None


async def process_command(
    db_session: Session,
    oracle: Oracle,
    command: str,
    conversation_id: str,
    board_id: Optional[str] = None
) -> Union[OperationResult, OperationError]:
    """
    Turn one natural-language command into one committed operation.

    Numbering hint, oracle call, validation and transactional dispatch. The
    oracle is called once; its failures come back as OperationError like any
    other.
    """
    try:
        hint = next_case_number(db_session)
        call = await propose_operation(oracle, command, hint)
    except OperationFailure as e:
        logger.warning("Command not understood", extra={
            "conversation_id": conversation_id,
            "kind": e.kind.value,
            "error": e.message
        })
        return e.to_error()

    return dispatch(db_session, call, conversation_id, command, board_id)


async def start_conversation_from_text(
    db_session: Session,
    oracle: Oracle,
    text: str,
    board_id: Optional[str] = None
) -> Union[ConversationStartResult, OperationError]:
    """
    Open a new conversation seeded with tasks parsed from free text.

    The conversation, its first transcript pair and the tasks are committed
    together.
    """
    try:
        call = await propose_operation(oracle, text, next_case_number(db_session))
        operation, args = validate_operation(call)
        if operation != OperationName.CREATE_TASKS:
            raise ContractViolation(
                f'Unexpected function call "{call.name}". Expected {OperationName.CREATE_TASKS.value}.',
                operation=call.name
            )

        with transaction(db_session):
            conversation = Conversation(topic=derive_topic(text))
            conversation_id = conversation.id
            db_session.add(conversation)
            db_session.flush()
            result = persist_task_creation(db_session, conversation_id, text, args, board_id)

    except OperationFailure as e:
        logger.warning("Could not start conversation from text", extra={
            "board_id": board_id,
            "kind": e.kind.value,
            "error": e.message
        })
        return e.to_error()

    except IntegrityError as e:
        logger.warning("Conversation start collided at commit", extra={
            "board_id": board_id,
            "error": str(e.orig)
        })
        return Conflict(
            "The change conflicts with an existing record. Try again with a different identifier."
        ).to_error()

    logger.info("Conversation started from text", extra={
        "conversation_id": conversation_id,
        "task_count": len(result.tasks)
    })

    return ConversationStartResult(tasks=result.tasks, conversation_id=conversation_id, board_id=board_id)
