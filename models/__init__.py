# Importing the package registers every table with SQLModel.metadata
from .boards import Board, BoardColumn, Task, TaskPriority
from .conversations import Conversation, ConversationMessage, MessageRole

__all__ = [
    "Board",
    "BoardColumn",
    "Task",
    "TaskPriority",
    "Conversation",
    "ConversationMessage",
    "MessageRole",
]
