from sqlmodel import SQLModel, Field, Column, UniqueConstraint
from sqlalchemy import JSON
from enum import Enum
from typing import Optional, Dict, Any
from datetime import datetime
from .helper import id_generator, utcnow


class TaskPriority(str, Enum):
    """Closed set of task priorities."""
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class Board(SQLModel, table=True):
    """Kanban board; `title` is a display duplicate of `name`."""
    id: str = Field(default_factory=id_generator('board', 10), primary_key=True)
    name: str = Field(index=True)
    title: str
    created_at: datetime = Field(default_factory=utcnow, index=True)
    updated_at: datetime = Field(default_factory=utcnow)


class BoardColumn(SQLModel, table=True):
    """Ordered column of a board, addressed by title within its board."""
    __table_args__ = (
        UniqueConstraint('board_id', 'title', name='uq_board_column_title'),
    )

    id: str = Field(default_factory=id_generator('column', 10), primary_key=True)
    board_id: str = Field(foreign_key="board.id", index=True)
    title: str
    helper: Optional[str] = Field(default=None)
    order: int = Field(default=0)


class Task(SQLModel, table=True):
    """Unit of work identified by its human-facing case number (TASK-<n>)."""
    id: str = Field(default_factory=id_generator('task', 10), primary_key=True)
    case_number: str = Field(unique=True, index=True)
    title: str
    description: str = Field(default="")
    status: str = Field(index=True)
    priority: TaskPriority = Field(default=TaskPriority.MEDIUM)
    board_id: Optional[str] = Field(default=None, foreign_key="board.id", index=True)
    conversation_id: Optional[str] = Field(default=None, foreign_key="conversation.id", index=True)
    meta_data: Dict[str, Any] = Field(default_factory=dict, sa_column=Column(JSON))
    created_at: datetime = Field(default_factory=utcnow, index=True)
    updated_at: datetime = Field(default_factory=utcnow)
