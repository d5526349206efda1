"""
Operation contract shared by the oracle prompt and the dispatcher.

The ten operations below are the only things the language model may ask for.
Argument models use snake_case attributes with the camelCase names the model
emits as aliases.
"""

from enum import Enum
from typing import Any, Dict, List, Optional, Type
from pydantic import BaseModel, ConfigDict, Field, StrictBool, field_validator, model_validator
from pydantic.alias_generators import to_camel
from models.boards import TaskPriority

PROMPT_VERSION = "2025-10-15"

CASE_NUMBER_PREFIX = "TASK-"


class OperationName(str, Enum):
    CREATE_TASKS = "create_tasks_from_text"
    UPDATE_TASK_STATUS = "update_task_status"
    DELETE_TASK = "delete_task"
    UPDATE_TASK_PROPERTIES = "update_task_properties"
    CREATE_BOARD = "create_board"
    UPDATE_BOARD = "update_board"
    DELETE_BOARD = "delete_board"
    CREATE_COLUMN = "create_column"
    UPDATE_COLUMN = "update_column"
    DELETE_COLUMN = "delete_column"


# Slug used in transcript metadata types: "<slug>-request" / "<slug>-response"
TRANSCRIPT_TYPES: Dict[OperationName, str] = {
    OperationName.CREATE_TASKS: "create-tasks",
    OperationName.UPDATE_TASK_STATUS: "update-task",
    OperationName.DELETE_TASK: "delete-task",
    OperationName.UPDATE_TASK_PROPERTIES: "update-task-properties",
    OperationName.CREATE_BOARD: "create-board",
    OperationName.UPDATE_BOARD: "update-board",
    OperationName.DELETE_BOARD: "delete-board",
    OperationName.CREATE_COLUMN: "create-column",
    OperationName.UPDATE_COLUMN: "update-column",
    OperationName.DELETE_COLUMN: "delete-column",
}

DEFAULT_COLUMNS = [
    {"title": "Backlog", "helper": "Ideas and items that are not in motion yet."},
    {"title": "In Progress", "helper": "Work currently being tackled."},
    {"title": "Testing", "helper": "Verifications, QA, or user review in flight."},
    {"title": "Done", "helper": "Completed work ready to close out."},
]


class ContractModel(BaseModel):
    """Base for argument models: camelCase on the wire, stripped strings, unknown keys dropped."""
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        str_strip_whitespace=True,
        extra="ignore",
    )

    def to_wire(self) -> Dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class TaskSpec(ContractModel):
    case_number: str = Field(..., min_length=1)
    title: str = Field(..., min_length=1)
    description: str = Field(..., min_length=1)
    status: str = Field(..., min_length=1)
    priority: TaskPriority


class CreateTasksArgs(ContractModel):
    tasks: List[TaskSpec] = Field(..., min_length=1)

    @field_validator("tasks")
    @classmethod
    def case_numbers_distinct(cls, tasks: List[TaskSpec]) -> List[TaskSpec]:
        seen = set()
        for task in tasks:
            if task.case_number in seen:
                raise ValueError(f"case number {task.case_number} appears more than once")
            seen.add(task.case_number)
        return tasks


class UpdateTaskStatusArgs(ContractModel):
    case_number: str = Field(..., min_length=1)
    new_status: str = Field(..., min_length=1)


class DeleteTaskArgs(ContractModel):
    case_number: str = Field(..., min_length=1)


class UpdateTaskPropertiesArgs(ContractModel):
    case_number: str = Field(..., min_length=1)
    new_case_number: Optional[str] = Field(default=None, min_length=1)
    new_title: Optional[str] = Field(default=None, min_length=1)
    new_description: Optional[str] = Field(default=None, min_length=1)
    new_priority: Optional[TaskPriority] = None

    @model_validator(mode="after")
    def has_changes(self) -> "UpdateTaskPropertiesArgs":
        if (
            self.new_case_number is None
            and self.new_title is None
            and self.new_description is None
            and self.new_priority is None
        ):
            raise ValueError(
                "at least one of newCaseNumber, newTitle, newDescription or newPriority is required"
            )
        return self


class ColumnSpec(ContractModel):
    title: str = Field(..., min_length=1)
    helper: Optional[str] = None


class CreateBoardArgs(ContractModel):
    name: str = Field(..., min_length=1)
    columns: Optional[List[ColumnSpec]] = None

    @field_validator("columns")
    @classmethod
    def column_titles_distinct(cls, columns: Optional[List[ColumnSpec]]) -> Optional[List[ColumnSpec]]:
        if columns is None:
            return columns
        titles = [column.title for column in columns]
        duplicates = sorted({title for title in titles if titles.count(title) > 1})
        if duplicates:
            raise ValueError(f"column titles must be distinct, repeated: {', '.join(duplicates)}")
        return columns


class UpdateBoardArgs(ContractModel):
    name: str = Field(..., min_length=1)


class DeleteBoardArgs(ContractModel):
    confirmed: StrictBool


class CreateColumnArgs(ContractModel):
    title: str = Field(..., min_length=1)
    helper: Optional[str] = None


class UpdateColumnArgs(ContractModel):
    title: str = Field(..., min_length=1)
    new_title: Optional[str] = Field(default=None, min_length=1)
    new_helper: Optional[str] = None

    @model_validator(mode="after")
    def has_changes(self) -> "UpdateColumnArgs":
        if self.new_title is None and self.new_helper is None:
            raise ValueError("at least one of newTitle or newHelper is required")
        return self


class DeleteColumnArgs(ContractModel):
    title: str = Field(..., min_length=1)


ARGUMENT_MODELS: Dict[OperationName, Type[ContractModel]] = {
    OperationName.CREATE_TASKS: CreateTasksArgs,
    OperationName.UPDATE_TASK_STATUS: UpdateTaskStatusArgs,
    OperationName.DELETE_TASK: DeleteTaskArgs,
    OperationName.UPDATE_TASK_PROPERTIES: UpdateTaskPropertiesArgs,
    OperationName.CREATE_BOARD: CreateBoardArgs,
    OperationName.UPDATE_BOARD: UpdateBoardArgs,
    OperationName.DELETE_BOARD: DeleteBoardArgs,
    OperationName.CREATE_COLUMN: CreateColumnArgs,
    OperationName.UPDATE_COLUMN: UpdateColumnArgs,
    OperationName.DELETE_COLUMN: DeleteColumnArgs,
}


def _string(description: str, enum: Optional[List[str]] = None) -> Dict[str, Any]:
    schema: Dict[str, Any] = {"type": "string", "description": description}
    if enum:
        schema["enum"] = enum
    return schema


def _object(properties: Dict[str, Any], required: List[str]) -> Dict[str, Any]:
    return {"type": "object", "properties": properties, "required": required}


PRIORITY_VALUES = [priority.value for priority in TaskPriority]

FUNCTION_DECLARATIONS: List[Dict[str, Any]] = [
    {
        "name": OperationName.CREATE_TASKS.value,
        "description": "Parses a block of text to create a list of structured task objects for the Kanban board.",
        "parameters": _object({
            "tasks": {
                "type": "array",
                "description": "An array of task objects.",
                "items": _object({
                    "caseNumber": _string("A unique identifier generated for the task, e.g., 'TASK-101'."),
                    "title": _string("A short title summarising the task."),
                    "description": _string("The full description of the task."),
                    "status": _string("The initial status of the task, i.e. the title of a board column."),
                    "priority": _string("The priority level of the task.", PRIORITY_VALUES),
                }, ["caseNumber", "title", "description", "status", "priority"]),
            },
        }, ["tasks"]),
    },
    {
        "name": OperationName.UPDATE_TASK_STATUS.value,
        "description": "Updates the status of a single existing task based on a user command.",
        "parameters": _object({
            "caseNumber": _string("The identifier of the task to be updated."),
            "newStatus": _string("The target status for the task, i.e. the title of a board column."),
        }, ["caseNumber", "newStatus"]),
    },
    {
        "name": OperationName.DELETE_TASK.value,
        "description": "Deletes a single existing task based on a user command.",
        "parameters": _object({
            "caseNumber": _string("The identifier of the task to be deleted."),
        }, ["caseNumber"]),
    },
    {
        "name": OperationName.UPDATE_TASK_PROPERTIES.value,
        "description": (
            "Updates properties of a single existing task such as title, description, "
            "case number, or priority based on a user command."
        ),
        "parameters": _object({
            "caseNumber": _string("The current identifier of the task to be updated."),
            "newCaseNumber": _string("The new case number for the task (optional)."),
            "newTitle": _string("The new title for the task (optional)."),
            "newDescription": _string("The new description for the task (optional)."),
            "newPriority": _string("The new priority level for the task (optional).", PRIORITY_VALUES),
        }, ["caseNumber"]),
    },
    {
        "name": OperationName.CREATE_BOARD.value,
        "description": "Creates a new board, optionally with a custom list of columns.",
        "parameters": _object({
            "name": _string("The name of the new board."),
            "columns": {
                "type": "array",
                "description": "Columns in display order (optional, defaults are used when omitted).",
                "items": _object({
                    "title": _string("The column title."),
                    "helper": _string("A short helper text describing the column (optional)."),
                }, ["title"]),
            },
        }, ["name"]),
    },
    {
        "name": OperationName.UPDATE_BOARD.value,
        "description": "Renames the active board.",
        "parameters": _object({
            "name": _string("The new name of the board."),
        }, ["name"]),
    },
    {
        "name": OperationName.DELETE_BOARD.value,
        "description": "Deletes the active board with all of its columns and tasks.",
        "parameters": _object({
            "confirmed": {
                "type": "boolean",
                "description": "True only when the user explicitly confirmed the deletion.",
            },
        }, ["confirmed"]),
    },
    {
        "name": OperationName.CREATE_COLUMN.value,
        "description": "Adds a column at the end of the active board.",
        "parameters": _object({
            "title": _string("The column title."),
            "helper": _string("A short helper text describing the column (optional)."),
        }, ["title"]),
    },
    {
        "name": OperationName.UPDATE_COLUMN.value,
        "description": "Renames a column of the active board or changes its helper text.",
        "parameters": _object({
            "title": _string("The current title of the column."),
            "newTitle": _string("The new title of the column (optional)."),
            "newHelper": _string("The new helper text of the column (optional)."),
        }, ["title"]),
    },
    {
        "name": OperationName.DELETE_COLUMN.value,
        "description": "Deletes a column of the active board.",
        "parameters": _object({
            "title": _string("The title of the column to delete."),
        }, ["title"]),
    },
]

SYSTEM_INSTRUCTION = f"""
You are an assistant for a Kanban board application. Your responses MUST always be provided as exactly one function call and MUST comply with version {PROMPT_VERSION} of the Kaiban contract.

When the user provides a list of tasks, treat each distinct line or bullet point as a separate task. For each task, generate a unique caseNumber that begins with "{CASE_NUMBER_PREFIX}", a short title, a description, and determine the initial status. If the text contains keywords such as "backlog", "later", or "on hold", set the status to "Backlog". If no status cues are present, default to "In Progress".

For priority assignment, analyze the task description carefully:
- Set priority to "high" if the task contains keywords like "urgent", "critical", "asap", "important", "hotfix", "blocker", "emergency", or has explicit high priority indicators.
- Set priority to "low" if the task contains keywords like "nice-to-have", "later", "when possible", "optional", "someday", or has explicit low priority indicators.
- Set priority to "medium" as the default when no clear priority indicators are present.
- Respect any explicit priority mentions from the user (e.g., "high priority task", "low priority", "medium importance").

Return the parsed work as a call to create_tasks_from_text that includes the final array of tasks with their assigned priorities.

When the user provides a command to change a task's status or move it to a different column, identify the referenced caseNumber and the desired status. Keywords like "finished", "completed", or "done" map to "Done". Keywords like "testing", "QA", or "send for review" map to "Testing". Phrases like "start work", "move back", or "in progress" map to "In Progress". Use update_task_status to return the result.

When the user provides a command to update a task's title, description, case number (rename), or priority, use update_task_properties. Extract the current caseNumber and provide only the fields that should change.

When the user provides a command to delete or remove a task, identify the referenced caseNumber and use delete_task.

When the user asks to create, rename, or delete a board, use create_board, update_board, or delete_board. Only set confirmed to true in delete_board when the user explicitly confirms the deletion.

When the user asks to add, rename, describe, or remove a column, use create_column, update_column, or delete_column and refer to the column by its current title.

Always extract case numbers from the user's command and normalize them to uppercase if needed. Never invent additional properties, never send natural language replies, and only use the provided schemas.
""".strip()
