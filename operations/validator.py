from typing import List, Tuple
from pydantic import ValidationError
from pydantic_core import ErrorDetails
from oracle.base import FunctionCall
from .contract import ARGUMENT_MODELS, ContractModel, OperationName
from .errors import ContractViolation


def _field_path(error: ErrorDetails) -> str:
    path = ".".join(str(part) for part in error["loc"])
    return path or "arguments"


def _error_message(error: ErrorDetails) -> str:
    message = error["msg"]
    # Raised from our own validators; pydantic prefixes those with "Value error, "
    if error["type"] == "value_error":
        message = message.removeprefix("Value error, ")
    return message


def validate_operation(call: FunctionCall) -> Tuple[OperationName, ContractModel]:
    """
    Check a proposed call against the operation contract.

    Returns the operation name and its parsed arguments. Raises
    ContractViolation naming every offending field when the name is unknown
    or the arguments do not fit the operation's schema.
    """
    try:
        operation = OperationName(call.name)
    except ValueError:
        expected = ", ".join(name.value for name in OperationName)
        raise ContractViolation(
            f'Unexpected function call "{call.name}". Expected one of: {expected}.',
            operation=call.name,
        )

    model = ARGUMENT_MODELS[operation]
    try:
        args = model.model_validate(call.args)
    except ValidationError as e:
        errors = e.errors(include_url=False)
        fields: List[str] = [_field_path(error) for error in errors]
        message = "; ".join(
            f"{_field_path(error)}: {_error_message(error)}" for error in errors
        )
        raise ContractViolation(
            f"Invalid arguments for {operation.value}: {message}",
            operation=operation.value,
            fields=fields,
        )

    return operation, args
