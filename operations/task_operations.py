from typing import Any, Dict, Optional
from sqlmodel import Session, select
from models.boards import Task
from models.helper import utcnow
from .board_operations import list_columns, require_board
from .contract import (
    PROMPT_VERSION, CreateTasksArgs, DeleteTaskArgs, OperationName, UpdateTaskPropertiesArgs,
    UpdateTaskStatusArgs
)
from .errors import Conflict, NotFound
from .results import CreateTasksResult, DeleteTaskResult, UpdatePropertiesResult, UpdateStatusResult
from .transcript import record_operation


def find_task(db_session: Session, case_number: str) -> Optional[Task]:
    return db_session.exec(select(Task).where(Task.case_number == case_number)).first()


def require_task(db_session: Session, case_number: str) -> Task:
    task = find_task(db_session, case_number)
    if not task:
        raise NotFound(f"Task {case_number} not found in the database.", case_number=case_number)
    return task


def ensure_case_number_free(db_session: Session, case_number: str) -> None:
    if find_task(db_session, case_number):
        raise Conflict(f"Task {case_number} already exists.", case_number=case_number)


def ensure_status_on_board(db_session: Session, board_id: str, status: str) -> None:
    """Statuses of board tasks must name one of the board's columns."""
    titles = {column.title for column in list_columns(db_session, board_id)}
    if status not in titles:
        raise NotFound(f'Column "{status}" not found.', board_id=board_id, column_title=status)


def merge_metadata(task: Task, **updates: Any) -> Dict[str, Any]:
    """New metadata bag: prior keys kept, updates layered on top."""
    current = task.meta_data if isinstance(task.meta_data, dict) else {}
    return {**current, **updates}


def persist_task_creation(
    db_session: Session,
    conversation_id: str,
    command: str,
    args: CreateTasksArgs,
    board_id: Optional[str] = None
) -> CreateTasksResult:
    """
    Insert a batch of tasks.

    Every case number is checked before anything is written, so the batch
    lands completely or not at all.
    """
    for spec in args.tasks:
        ensure_case_number_free(db_session, spec.case_number)

    if board_id:
        require_board(db_session, board_id, "No active board.")
        for spec in args.tasks:
            ensure_status_on_board(db_session, board_id, spec.status)

    now = utcnow()
    tasks = [
        Task(
            case_number=spec.case_number,
            title=spec.title,
            description=spec.description,
            status=spec.status,
            priority=spec.priority,
            board_id=board_id or None,
            conversation_id=conversation_id,
            meta_data={
                "createdVia": "create-tasks",
                "createdAt": now.isoformat(),
                "promptVersion": PROMPT_VERSION,
            },
            created_at=now,
            updated_at=now
        )
        for spec in args.tasks
    ]
    db_session.add_all(tasks)

    task_list = "\n".join(f"{spec.case_number}: {spec.title}" for spec in args.tasks)
    record_operation(
        db_session, conversation_id, OperationName.CREATE_TASKS, command,
        f"Created {len(tasks)} task(s):\n{task_list}",
        args.to_wire()
    )

    return CreateTasksResult(tasks=args.tasks)


def persist_task_status_update(
    db_session: Session,
    conversation_id: str,
    command: str,
    args: UpdateTaskStatusArgs,
    board_id: Optional[str] = None
) -> UpdateStatusResult:
    task = require_task(db_session, args.case_number)

    if task.board_id:
        ensure_status_on_board(db_session, task.board_id, args.new_status)

    now = utcnow()
    task.status = args.new_status
    task.updated_at = now
    task.meta_data = merge_metadata(
        task,
        status=args.new_status,
        updatedVia="update-task",
        updatedAt=now.isoformat(),
        promptVersion=PROMPT_VERSION,
        lastResult=args.to_wire()
    )
    db_session.add(task)

    record_operation(
        db_session, conversation_id, OperationName.UPDATE_TASK_STATUS, command,
        f"{args.case_number} moved to {args.new_status}.",
        args.to_wire()
    )

    return UpdateStatusResult(case_number=args.case_number, new_status=args.new_status)


def persist_task_deletion(
    db_session: Session,
    conversation_id: str,
    command: str,
    args: DeleteTaskArgs,
    board_id: Optional[str] = None
) -> DeleteTaskResult:
    task = require_task(db_session, args.case_number)
    db_session.delete(task)

    record_operation(
        db_session, conversation_id, OperationName.DELETE_TASK, command,
        f"{args.case_number} has been deleted.",
        args.to_wire()
    )

    return DeleteTaskResult(case_number=args.case_number)


def persist_task_properties_update(
    db_session: Session,
    conversation_id: str,
    command: str,
    args: UpdateTaskPropertiesArgs,
    board_id: Optional[str] = None
) -> UpdatePropertiesResult:
    """Sparse update of case number, title, description and priority."""
    task = require_task(db_session, args.case_number)

    renamed = bool(args.new_case_number) and args.new_case_number != args.case_number
    if renamed:
        ensure_case_number_free(db_session, args.new_case_number)

    changes = []
    if renamed:
        task.case_number = args.new_case_number
        changes.append(f"renamed to {args.new_case_number}")
    if args.new_title:
        task.title = args.new_title
        changes.append("title updated")
    if args.new_description:
        task.description = args.new_description
        changes.append("description updated")
    if args.new_priority:
        task.priority = args.new_priority
        changes.append(f"priority changed to {args.new_priority.value}")

    now = utcnow()
    task.updated_at = now
    task.meta_data = merge_metadata(
        task,
        updatedVia="update-task-properties",
        updatedAt=now.isoformat(),
        promptVersion=PROMPT_VERSION,
        lastResult=args.to_wire()
    )
    db_session.add(task)

    record_operation(
        db_session, conversation_id, OperationName.UPDATE_TASK_PROPERTIES, command,
        f"{args.case_number} {' and '.join(changes) or 'unchanged'}.",
        args.to_wire()
    )

    return UpdatePropertiesResult(
        case_number=args.case_number,
        new_case_number=args.new_case_number,
        new_title=args.new_title,
        new_description=args.new_description,
        new_priority=args.new_priority
    )
