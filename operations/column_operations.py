from typing import Optional
from sqlmodel import Session, select
from models.boards import BoardColumn, Task
from .board_operations import find_column, list_columns, require_board
from .contract import CreateColumnArgs, DeleteColumnArgs, OperationName, UpdateColumnArgs
from .errors import Conflict, NotFound
from .results import ColumnPayload, CreateColumnResult, DeleteColumnResult, UpdateColumnResult
from .transcript import record_operation


def require_column(db_session: Session, board_id: Optional[str], title: str, missing_board_message: str) -> BoardColumn:
    """Columns are addressed by title within the active board."""
    if not board_id:
        raise NotFound(missing_board_message)

    column = find_column(db_session, board_id, title)
    if not column:
        raise NotFound(f'Column "{title}" not found.', board_id=board_id, column_title=title)
    return column


def ensure_title_free(db_session: Session, board_id: str, title: str) -> None:
    if find_column(db_session, board_id, title):
        raise Conflict(
            f'Column "{title}" already exists on this board.', board_id=board_id, column_title=title
        )


def persist_column_creation(
    db_session: Session,
    conversation_id: str,
    command: str,
    args: CreateColumnArgs,
    board_id: Optional[str] = None
) -> CreateColumnResult:
    """Append a column after the board's highest order."""
    board = require_board(db_session, board_id, "No active board to add column to.")
    ensure_title_free(db_session, board.id, args.title)

    orders = [column.order for column in list_columns(db_session, board.id)]
    column = BoardColumn(
        board_id=board.id,
        title=args.title,
        helper=args.helper or None,
        order=max(orders) + 1 if orders else 0
    )
    db_session.add(column)

    record_operation(
        db_session, conversation_id, OperationName.CREATE_COLUMN, command,
        f'Column "{args.title}" added to board.',
        args.to_wire()
    )

    return CreateColumnResult(column=ColumnPayload.model_validate(column))


def persist_column_update(
    db_session: Session,
    conversation_id: str,
    command: str,
    args: UpdateColumnArgs,
    board_id: Optional[str] = None
) -> UpdateColumnResult:
    """Rename a column and/or replace its helper text; order is never touched."""
    column = require_column(db_session, board_id, args.title, "No active board to update column in.")

    if args.new_title and args.new_title != args.title:
        ensure_title_free(db_session, column.board_id, args.new_title)

    changes = []
    if args.new_title:
        column.title = args.new_title
        changes.append(f'renamed to "{args.new_title}"')
    if args.new_helper is not None:
        # An empty helper clears it
        column.helper = args.new_helper or None
        changes.append("helper text updated")
    db_session.add(column)

    record_operation(
        db_session, conversation_id, OperationName.UPDATE_COLUMN, command,
        f'Column "{args.title}" {" and ".join(changes)}.',
        args.to_wire()
    )

    return UpdateColumnResult(column=ColumnPayload.model_validate(column))


def persist_column_deletion(
    db_session: Session,
    conversation_id: str,
    command: str,
    args: DeleteColumnArgs,
    board_id: Optional[str] = None
) -> DeleteColumnResult:
    """
    Delete a column of the active board.

    Tasks whose status is the column title are not deleted here: the client
    hides them, and the result lists them so it knows which ones.
    """
    column = require_column(db_session, board_id, args.title, "No active board to delete column from.")

    orphaned = db_session.exec(
        select(Task.case_number).where(Task.board_id == column.board_id, Task.status == column.title)
    ).all()

    db_session.delete(column)

    record_operation(
        db_session, conversation_id, OperationName.DELETE_COLUMN, command,
        f'Column "{args.title}" has been deleted.',
        args.to_wire()
    )

    return DeleteColumnResult(column_title=args.title, orphaned_case_numbers=sorted(orphaned))
