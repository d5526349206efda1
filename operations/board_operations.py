from typing import List, Optional
from sqlmodel import Session, select
from models.boards import Board, BoardColumn, Task
from models.helper import utcnow
from .contract import (
    DEFAULT_COLUMNS, ColumnSpec, CreateBoardArgs, DeleteBoardArgs, OperationName, UpdateBoardArgs
)
from .errors import NotFound, Unconfirmed
from .results import BoardPayload, CreateBoardResult, DeleteBoardResult, UpdateBoardResult
from .transcript import record_operation


def require_confirmation(args: DeleteBoardArgs, board_id: Optional[str]) -> None:
    if not args.confirmed:
        raise Unconfirmed("Board deletion not confirmed.", board_id=board_id)


def require_board(db_session: Session, board_id: Optional[str], missing_message: str) -> Board:
    """Resolve the active board, failing when none is selected or it no longer exists."""
    if not board_id:
        raise NotFound(missing_message)

    board = db_session.exec(select(Board).where(Board.id == board_id)).first()
    if not board:
        raise NotFound("Board not found.", board_id=board_id)
    return board


def list_columns(db_session: Session, board_id: str) -> List[BoardColumn]:
    statement = select(BoardColumn).where(BoardColumn.board_id == board_id).order_by(BoardColumn.order)
    return list(db_session.exec(statement).all())


def find_column(db_session: Session, board_id: str, title: str) -> Optional[BoardColumn]:
    statement = select(BoardColumn).where(BoardColumn.board_id == board_id, BoardColumn.title == title)
    return db_session.exec(statement).first()


def delete_board_records(db_session: Session, board: Board) -> int:
    """Remove a board with its tasks and columns; returns the number of tasks removed."""
    tasks = db_session.exec(select(Task).where(Task.board_id == board.id)).all()
    for task in tasks:
        db_session.delete(task)

    for column in list_columns(db_session, board.id):
        db_session.delete(column)

    # Children first so foreign keys never point at a deleted board
    db_session.flush()
    db_session.delete(board)
    return len(tasks)


def persist_board_creation(
    db_session: Session,
    conversation_id: str,
    command: str,
    args: CreateBoardArgs,
    board_id: Optional[str] = None
) -> CreateBoardResult:
    """Create a board with the requested columns, or the default four. The active board is ignored."""
    specs = args.columns if args.columns is not None else [ColumnSpec(**column) for column in DEFAULT_COLUMNS]

    board = Board(name=args.name, title=args.name)
    columns = [
        BoardColumn(board_id=board.id, title=spec.title, helper=spec.helper, order=index)
        for index, spec in enumerate(specs)
    ]
    db_session.add(board)
    db_session.flush()
    db_session.add_all(columns)

    record_operation(
        db_session, conversation_id, OperationName.CREATE_BOARD, command,
        f'Created board "{args.name}" with {len(columns)} column(s).',
        args.to_wire()
    )

    return CreateBoardResult(board=BoardPayload.from_board(board, columns))


def persist_board_update(
    db_session: Session,
    conversation_id: str,
    command: str,
    args: UpdateBoardArgs,
    board_id: Optional[str] = None
) -> UpdateBoardResult:
    board = require_board(db_session, board_id, "No active board to update.")

    board.name = args.name
    board.title = args.name
    board.updated_at = utcnow()
    db_session.add(board)

    record_operation(
        db_session, conversation_id, OperationName.UPDATE_BOARD, command,
        f'Board renamed to "{args.name}".',
        args.to_wire()
    )

    return UpdateBoardResult(board=BoardPayload.from_board(board, list_columns(db_session, board.id)))


def persist_board_deletion(
    db_session: Session,
    conversation_id: str,
    command: str,
    args: DeleteBoardArgs,
    board_id: Optional[str] = None
) -> DeleteBoardResult:
    """Delete the active board; its columns and tasks go with it."""
    require_confirmation(args, board_id)

    board = require_board(db_session, board_id, "No active board to delete.")
    board_name = board.name
    deleted_board_id = board.id

    delete_board_records(db_session, board)

    record_operation(
        db_session, conversation_id, OperationName.DELETE_BOARD, command,
        f'Board "{board_name}" has been deleted.',
        args.to_wire()
    )

    return DeleteBoardResult(board_id=deleted_board_id)
