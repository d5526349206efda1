from pydantic import AliasChoices, Field, model_validator
from typing import Any, Dict, Optional
from datetime import datetime
from models.boards import TaskPriority
from .common import CamelSchema


class UpdateTaskRequest(CamelSchema):
    """Schema for editing a task by hand."""
    new_case_number: Optional[str] = Field(default=None, description="New case number")
    description: Optional[str] = Field(default=None, description="New task description")
    priority: Optional[TaskPriority] = Field(default=None, description="New priority")

    @model_validator(mode="after")
    def check_has_changes(self) -> "UpdateTaskRequest":
        if not self.new_case_number and self.description is None and self.priority is None:
            raise ValueError("Provide at least one of newCaseNumber, description or priority")
        return self


# Response Schemas
class TaskResponse(CamelSchema):
    """Schema for task responses."""
    id: str = Field(..., description="Task ID")
    case_number: str = Field(..., description="Human facing identifier, e.g. TASK-7")
    title: str = Field(..., description="Task title")
    description: str = Field(..., description="Task description")
    status: str = Field(..., description="Column title the task sits in")
    priority: TaskPriority = Field(..., description="Task priority")
    board_id: Optional[str] = Field(default=None, description="Owning board")
    conversation_id: Optional[str] = Field(default=None, description="Conversation that created the task")
    # `metadata` is taken on SQLModel tables, so it is only the wire name
    meta_data: Dict[str, Any] = Field(
        default_factory=dict,
        validation_alias=AliasChoices("meta_data", "metadata"),
        serialization_alias="metadata",
        description="Provenance bag"
    )
    created_at: datetime = Field(..., description="Creation timestamp")
    updated_at: datetime = Field(..., description="Last update timestamp")


class NextCaseNumberResponse(CamelSchema):
    case_number: str = Field(..., description="Next free case number")
    number: int = Field(..., description="Numeric part of the case number")
