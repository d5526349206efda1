from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy import func
from sqlmodel import Session, select
from database import get_session, transaction
from models.boards import Board, BoardColumn, Task
from models.helper import utcnow
from operations.board_operations import delete_board_records, list_columns
from operations.contract import DEFAULT_COLUMNS
from settings import logger
from .schemas.boards import (
    BoardDetailResponse, BoardResponse, ClearBoardResponse, ColumnRequest, ColumnResponse, CreateBoardRequest,
    UpdateBoardRequest
)
from .schemas.common import MessageResponse
from .schemas.tasks import TaskResponse
from typing import List

router = APIRouter(prefix="/boards", tags=["boards"])


def get_board_or_404(db_session: Session, board_id: str) -> Board:
    board = db_session.exec(select(Board).where(Board.id == board_id)).first()
    if not board:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Board not found"
        )
    return board


def count_board_tasks(db_session: Session, board_id: str) -> int:
    statement = select(func.count()).select_from(Task).where(Task.board_id == board_id)
    return db_session.exec(statement).one()


def build_board_response(db_session: Session, board: Board) -> BoardResponse:
    return BoardResponse(
        id=board.id,
        name=board.name,
        title=board.title,
        columns=[ColumnResponse.model_validate(column) for column in list_columns(db_session, board.id)],
        task_count=count_board_tasks(db_session, board.id),
        created_at=board.created_at,
        updated_at=board.updated_at
    )


@router.get("")
async def list_boards(
    db_session: Session = Depends(get_session)
) -> List[BoardResponse]:
    """List all boards, newest first, with their columns and task counts."""
    boards = db_session.exec(select(Board).order_by(Board.created_at.desc())).all()
    return [build_board_response(db_session, board) for board in boards]


@router.get("/{board_id}")
async def get_board(
    board_id: str,
    db_session: Session = Depends(get_session)
) -> BoardDetailResponse:
    """Get board with all columns and tasks."""
    board = get_board_or_404(db_session, board_id)

    tasks = db_session.exec(
        select(Task).where(Task.board_id == board_id).order_by(Task.created_at.desc())
    ).all()

    summary = build_board_response(db_session, board)
    return BoardDetailResponse(
        **summary.model_dump(),
        tasks=[TaskResponse.model_validate(task) for task in tasks]
    )


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_board(
    board_data: CreateBoardRequest,
    db_session: Session = Depends(get_session)
) -> BoardResponse:
    """Create a new board. Without explicit columns it gets the default four."""
    specs = board_data.columns
    if specs is None:
        specs = [ColumnRequest(**column) for column in DEFAULT_COLUMNS]

    with transaction(db_session):
        new_board = Board(name=board_data.name, title=board_data.name)
        db_session.add(new_board)
        db_session.flush()

        for index, spec in enumerate(specs):
            db_session.add(
                BoardColumn(board_id=new_board.id, title=spec.title, helper=spec.helper or None, order=index)
            )

    db_session.refresh(new_board)
    logger.info("Board created", extra={"board_id": new_board.id})

    return build_board_response(db_session, new_board)


@router.patch("/{board_id}")
async def update_board(
    board_id: str,
    board_data: UpdateBoardRequest,
    db_session: Session = Depends(get_session)
) -> BoardResponse:
    """Rename a board; its title follows the name."""
    board = get_board_or_404(db_session, board_id)

    with transaction(db_session):
        board.name = board_data.name
        board.title = board_data.name
        board.updated_at = utcnow()
        db_session.add(board)

    db_session.refresh(board)
    return build_board_response(db_session, board)


@router.delete("/{board_id}")
async def delete_board(
    board_id: str,
    db_session: Session = Depends(get_session)
) -> MessageResponse:
    """Delete a board together with its columns and tasks."""
    board = get_board_or_404(db_session, board_id)

    with transaction(db_session):
        removed = delete_board_records(db_session, board)

    logger.info("Board deleted", extra={"board_id": board_id, "task_count": removed})

    return MessageResponse(message="Board deleted successfully")


@router.post("/{board_id}/clear")
async def clear_board(
    board_id: str,
    db_session: Session = Depends(get_session)
) -> ClearBoardResponse:
    """Remove every task of a board, keeping the board and its columns."""
    get_board_or_404(db_session, board_id)

    with transaction(db_session):
        tasks = db_session.exec(select(Task).where(Task.board_id == board_id)).all()
        for task in tasks:
            db_session.delete(task)

    return ClearBoardResponse(board_id=board_id, cleared_count=len(tasks))
