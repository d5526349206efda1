from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.exc import IntegrityError
from sqlmodel import Session, select
from database import get_session, transaction
from models.boards import Task
from models.helper import utcnow
from operations.contract import CASE_NUMBER_PREFIX
from operations.sequence import next_case_number
from operations.task_operations import find_task, merge_metadata
from settings import logger
from .schemas.tasks import NextCaseNumberResponse, TaskResponse, UpdateTaskRequest
from typing import List, Optional

router = APIRouter(prefix="/tasks", tags=["tasks"])


def get_task_or_404(db_session: Session, case_number: str) -> Task:
    task = find_task(db_session, case_number)
    if not task:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Task {case_number} not found"
        )
    return task


@router.get("", response_model=List[TaskResponse])
async def list_tasks(
    board_id: Optional[str] = Query(default=None, alias="boardId", description="Only tasks of this board"),
    db_session: Session = Depends(get_session)
) -> List[TaskResponse]:
    """List tasks, newest first."""
    statement = select(Task)
    if board_id:
        statement = statement.where(Task.board_id == board_id)
    tasks = db_session.exec(statement.order_by(Task.created_at.desc())).all()

    return [TaskResponse.model_validate(task) for task in tasks]


@router.get("/next-case-number", response_model=NextCaseNumberResponse)
async def get_next_case_number(
    db_session: Session = Depends(get_session)
) -> NextCaseNumberResponse:
    """Next free TASK-<n> identifier."""
    number = next_case_number(db_session)
    return NextCaseNumberResponse(case_number=f"{CASE_NUMBER_PREFIX}{number}", number=number)


@router.get("/{case_number}", response_model=TaskResponse)
async def get_task(
    case_number: str,
    db_session: Session = Depends(get_session)
) -> TaskResponse:
    """Get a task by case number."""
    return TaskResponse.model_validate(get_task_or_404(db_session, case_number))


@router.patch("/{case_number}", response_model=TaskResponse)
async def update_task(
    case_number: str,
    task_data: UpdateTaskRequest,
    db_session: Session = Depends(get_session)
) -> TaskResponse:
    """Edit a task by hand: case number, description and priority."""
    task = get_task_or_404(db_session, case_number)

    new_case_number = task_data.new_case_number
    if new_case_number and new_case_number != case_number and find_task(db_session, new_case_number):
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=f"Task {new_case_number} already exists"
        )

    try:
        with transaction(db_session):
            if new_case_number:
                task.case_number = new_case_number
            if task_data.description is not None:
                task.description = task_data.description
            if task_data.priority is not None:
                task.priority = task_data.priority

            now = utcnow()
            task.updated_at = now
            task.meta_data = merge_metadata(task, updatedVia="manual-edit", updatedAt=now.isoformat())
            db_session.add(task)
    except IntegrityError:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=f"Task {new_case_number} already exists"
        )

    db_session.refresh(task)
    logger.info("Task edited", extra={"case_number": case_number, "new_case_number": task.case_number})

    return TaskResponse.model_validate(task)
