from pydantic import Field, field_validator
from typing import List, Optional
from datetime import datetime
from .common import CamelSchema
from .tasks import TaskResponse


class ColumnRequest(CamelSchema):
    """Schema for a column supplied with a new board."""
    title: str = Field(..., min_length=1, description="Column title, unique within the board")
    helper: Optional[str] = Field(default=None, description="Guidance shown under the title")


class CreateBoardRequest(CamelSchema):
    """Schema for creating a new board."""
    name: str = Field(..., min_length=1, description="Board name")
    columns: Optional[List[ColumnRequest]] = Field(
        default=None, description="Columns in display order; the default four when omitted"
    )

    @field_validator("columns")
    @classmethod
    def check_distinct_titles(cls, columns: Optional[List[ColumnRequest]]) -> Optional[List[ColumnRequest]]:
        if columns is None:
            return columns
        if not columns:
            raise ValueError("A board needs at least one column")
        titles = [column.title.strip() for column in columns]
        if len(set(titles)) != len(titles):
            raise ValueError("Column titles must be unique within a board")
        return columns


class UpdateBoardRequest(CamelSchema):
    """Schema for renaming a board."""
    name: str = Field(..., min_length=1, description="New board name")


# Response Schemas
class ColumnResponse(CamelSchema):
    id: str = Field(..., description="Column ID")
    title: str = Field(..., description="Column title")
    helper: Optional[str] = Field(default=None, description="Guidance shown under the title")
    order: int = Field(..., description="Display position")


class BoardResponse(CamelSchema):
    """Schema for board responses."""
    id: str = Field(..., description="Board ID")
    name: str = Field(..., description="Board name")
    title: str = Field(..., description="Display title, same as name")
    columns: List[ColumnResponse] = Field(default_factory=list, description="Columns in display order")
    task_count: int = Field(default=0, description="Number of tasks on the board")
    created_at: datetime = Field(..., description="Creation timestamp")
    updated_at: datetime = Field(..., description="Last update timestamp")


class BoardDetailResponse(BoardResponse):
    """Board with its tasks."""
    tasks: List[TaskResponse] = Field(default_factory=list, description="Tasks on the board, newest first")


class ClearBoardResponse(CamelSchema):
    board_id: str = Field(..., description="Board whose tasks were removed")
    cleared_count: int = Field(..., description="Number of tasks removed")
