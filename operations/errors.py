"""
Failure taxonomy for command processing.

Routines raise `OperationFailure` subclasses so the surrounding transaction
rolls back; the dispatcher converts them into `OperationError` values, which
is what callers receive.
"""

from enum import Enum
from typing import Any, Dict
from pydantic import BaseModel, Field


class ErrorKind(str, Enum):
    """Tags of the error variants returned to callers."""
    CONTRACT_VIOLATION = "contract_violation"
    NOT_FOUND = "not_found"
    CONFLICT = "conflict"
    UNCONFIRMED = "unconfirmed"
    ORACLE_FAILURE = "oracle_failure"


class OperationError(BaseModel):
    """Structured, user-displayable failure of one command."""
    kind: ErrorKind = Field(..., description="Error variant")
    message: str = Field(..., description="Human readable explanation")
    details: Dict[str, Any] = Field(default_factory=dict, description="Identifiers and fields involved")


class OperationFailure(Exception):
    """Base exception for failures raised while handling an operation."""

    kind: ErrorKind

    def __init__(self, message: str, **details: Any):
        self.message = message
        self.details = details
        super().__init__(message)

    def to_error(self) -> OperationError:
        return OperationError(kind=self.kind, message=self.message, details=self.details)


class ContractViolation(OperationFailure):
    """Oracle output that does not fit the operation contract."""
    kind = ErrorKind.CONTRACT_VIOLATION


class NotFound(OperationFailure):
    """Referenced conversation, task, board or column does not exist."""
    kind = ErrorKind.NOT_FOUND


class Conflict(OperationFailure):
    """Create or rename would collide with an existing identifier."""
    kind = ErrorKind.CONFLICT


class Unconfirmed(OperationFailure):
    """Destructive operation proposed without confirmation."""
    kind = ErrorKind.UNCONFIRMED


class OracleFailure(OperationFailure):
    """The language model call itself failed."""
    kind = ErrorKind.ORACLE_FAILURE
