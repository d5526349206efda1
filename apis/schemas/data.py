from pydantic import Field
from typing import List
from .boards import BoardResponse
from .common import CamelSchema
from .conversations import ConversationDetailResponse
from .tasks import TaskResponse


class DataSnapshotResponse(CamelSchema):
    """Everything the UI needs on first load."""
    conversations: List[ConversationDetailResponse] = Field(default_factory=list)
    tasks: List[TaskResponse] = Field(default_factory=list)
    boards: List[BoardResponse] = Field(default_factory=list)
