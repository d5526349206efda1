"""
Transactional dispatch of validated operations.

`dispatch` is the boundary where failures stop being exceptions: whatever goes
wrong, the transaction is rolled back and the caller gets an OperationError
value instead of a result.
"""

from typing import Callable, Dict, Optional, Union
from sqlalchemy.exc import IntegrityError
from sqlmodel import Session
from database import transaction
from oracle.base import FunctionCall
from settings import logger
from .board_operations import (
    persist_board_creation, persist_board_deletion, persist_board_update, require_confirmation
)
from .column_operations import persist_column_creation, persist_column_deletion, persist_column_update
from .contract import ContractModel, OperationName
from .errors import Conflict, OperationError, OperationFailure
from .results import OperationResult
from .task_operations import (
    persist_task_creation, persist_task_deletion, persist_task_properties_update,
    persist_task_status_update
)
from .transcript import require_conversation
from .validator import validate_operation

Routine = Callable[[Session, str, str, ContractModel, Optional[str]], OperationResult]

ROUTINES: Dict[OperationName, Routine] = {
    OperationName.CREATE_TASKS: persist_task_creation,
    OperationName.UPDATE_TASK_STATUS: persist_task_status_update,
    OperationName.DELETE_TASK: persist_task_deletion,
    OperationName.UPDATE_TASK_PROPERTIES: persist_task_properties_update,
    OperationName.CREATE_BOARD: persist_board_creation,
    OperationName.UPDATE_BOARD: persist_board_update,
    OperationName.DELETE_BOARD: persist_board_deletion,
    OperationName.CREATE_COLUMN: persist_column_creation,
    OperationName.UPDATE_COLUMN: persist_column_update,
    OperationName.DELETE_COLUMN: persist_column_deletion,
}


def dispatch(
    db_session: Session,
    call: FunctionCall,
    conversation_id: str,
    command: str,
    board_id: Optional[str] = None
) -> Union[OperationResult, OperationError]:
    """
    Validate a proposed call and apply it atomically.

    The state change and the USER/ASSISTANT transcript pair commit together or
    not at all. Arguments are validated before the session is touched.

    Returns:
        The tagged result of the operation, or an OperationError describing
        why nothing was written
    """
    logger.info("Dispatching operation", extra={
        "operation": call.name,
        "conversation_id": conversation_id,
        "board_id": board_id
    })

    try:
        operation, args = validate_operation(call)
        routine = ROUTINES[operation]
        if operation == OperationName.DELETE_BOARD:
            # Refused before the session is read
            require_confirmation(args, board_id)

        with transaction(db_session):
            require_conversation(db_session, conversation_id)
            result = routine(db_session, conversation_id, command, args, board_id)

    except OperationFailure as e:
        logger.warning("Operation rejected", extra={
            "operation": call.name,
            "conversation_id": conversation_id,
            "kind": e.kind.value,
            "error": e.message
        })
        return e.to_error()

    except IntegrityError as e:
        # A concurrent writer took the identifier between our check and the commit
        logger.warning("Operation collided at commit", extra={
            "operation": call.name,
            "conversation_id": conversation_id,
            "error": str(e.orig)
        })
        return Conflict(
            "The change conflicts with an existing record. Try again with a different identifier.",
            operation=call.name
        ).to_error()

    logger.info("Operation committed", extra={
        "operation": operation.value,
        "conversation_id": conversation_id,
        "action": result.action
    })

    return result
