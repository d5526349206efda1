from typing import Annotated, Any, Dict, List, Literal, Optional, Union
from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel
from models.boards import Board, BoardColumn, TaskPriority
from .contract import TaskSpec


class ResultModel(BaseModel):
    """Base for UI-facing payloads, serialised with camelCase names."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)

    def to_payload(self) -> Dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True)


class ColumnPayload(ResultModel):
    id: str
    title: str
    helper: Optional[str] = None
    order: int


class BoardPayload(ResultModel):
    id: str
    name: str
    title: str
    columns: List[ColumnPayload] = Field(default_factory=list)

    @classmethod
    def from_board(cls, board: Board, columns: List[BoardColumn]) -> "BoardPayload":
        ordered = sorted(columns, key=lambda column: column.order)
        return cls(
            id=board.id,
            name=board.name,
            title=board.title,
            columns=[ColumnPayload.model_validate(column) for column in ordered]
        )


class CreateTasksResult(ResultModel):
    action: Literal["create_tasks"] = "create_tasks"
    tasks: List[TaskSpec]


class UpdateStatusResult(ResultModel):
    action: Literal["update_status"] = "update_status"
    case_number: str
    new_status: str


class DeleteTaskResult(ResultModel):
    action: Literal["delete"] = "delete"
    case_number: str


class UpdatePropertiesResult(ResultModel):
    action: Literal["update_properties"] = "update_properties"
    case_number: str
    new_case_number: Optional[str] = None
    new_title: Optional[str] = None
    new_description: Optional[str] = None
    new_priority: Optional[TaskPriority] = None


class CreateBoardResult(ResultModel):
    action: Literal["create_board"] = "create_board"
    board: BoardPayload


class UpdateBoardResult(ResultModel):
    action: Literal["update_board"] = "update_board"
    board: BoardPayload


class DeleteBoardResult(ResultModel):
    action: Literal["delete_board"] = "delete_board"
    board_id: str


class CreateColumnResult(ResultModel):
    action: Literal["create_column"] = "create_column"
    column: ColumnPayload


class UpdateColumnResult(ResultModel):
    action: Literal["update_column"] = "update_column"
    column: ColumnPayload


class DeleteColumnResult(ResultModel):
    action: Literal["delete_column"] = "delete_column"
    column_title: str
    # Tasks still carrying the deleted title as status; the client hides them
    orphaned_case_numbers: List[str] = Field(default_factory=list)


OperationResult = Annotated[
    Union[
        CreateTasksResult,
        UpdateStatusResult,
        DeleteTaskResult,
        UpdatePropertiesResult,
        CreateBoardResult,
        UpdateBoardResult,
        DeleteBoardResult,
        CreateColumnResult,
        UpdateColumnResult,
        DeleteColumnResult,
    ],
    Field(discriminator="action"),
]
