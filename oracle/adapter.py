from operations.contract import FUNCTION_DECLARATIONS, OperationName
from operations.errors import ContractViolation
from settings import logger
from .base import FunctionCall, Oracle

KNOWN_OPERATIONS = {name.value for name in OperationName}


def build_prompt(command: str, next_case_number: int) -> str:
    """Append the numbering hint the model uses for new case numbers."""
    return f"{command}\n\n[System: Start task numbering from TASK-{next_case_number}]"


async def propose_operation(oracle: Oracle, command: str, next_case_number: int) -> FunctionCall:
    """
    Ask the oracle which operation the command maps to.

    Only the operation name is checked here; argument shapes are left to the
    validator.
    """
    call = await oracle.complete(build_prompt(command, next_case_number), FUNCTION_DECLARATIONS)

    if call.name not in KNOWN_OPERATIONS:
        logger.warning("Oracle proposed unknown operation", extra={"operation": call.name})
        raise ContractViolation(
            f'Unexpected function call "{call.name}". Expected one of: {", ".join(sorted(KNOWN_OPERATIONS))}.',
            operation=call.name,
        )

    return call
