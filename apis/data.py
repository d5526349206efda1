from fastapi import APIRouter, Depends, Query
from sqlmodel import Session, select
from database import get_session
from models.boards import Board, Task
from models.conversations import Conversation
from .boards import build_board_response
from .conversations import build_conversation_detail
from .schemas.data import DataSnapshotResponse
from .schemas.tasks import TaskResponse
from typing import Optional

router = APIRouter(prefix="/data", tags=["data"])


@router.get("")
async def get_data_snapshot(
    board_id: Optional[str] = Query(default=None, alias="boardId", description="Only tasks of this board"),
    db_session: Session = Depends(get_session)
) -> DataSnapshotResponse:
    """Conversations with transcripts, tasks and boards in one round trip."""
    conversations = db_session.exec(select(Conversation).order_by(Conversation.created_at.desc())).all()

    task_statement = select(Task)
    if board_id:
        task_statement = task_statement.where(Task.board_id == board_id)
    tasks = db_session.exec(task_statement.order_by(Task.created_at.desc())).all()

    boards = db_session.exec(select(Board).order_by(Board.created_at.desc())).all()

    return DataSnapshotResponse(
        conversations=[build_conversation_detail(db_session, conversation) for conversation in conversations],
        tasks=[TaskResponse.model_validate(task) for task in tasks],
        boards=[build_board_response(db_session, board) for board in boards]
    )
