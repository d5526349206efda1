from typing import NoReturn
from fastapi import HTTPException, status
from oracle.base import Oracle, OracleFactory
from operations.errors import ErrorKind, OperationError
from settings import ORACLE_PROVIDER

ERROR_STATUS_CODES = {
    ErrorKind.NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorKind.CONFLICT: status.HTTP_409_CONFLICT,
    ErrorKind.UNCONFIRMED: status.HTTP_400_BAD_REQUEST,
    ErrorKind.CONTRACT_VIOLATION: status.HTTP_422_UNPROCESSABLE_ENTITY,
    ErrorKind.ORACLE_FAILURE: status.HTTP_502_BAD_GATEWAY,
}


def get_oracle() -> Oracle:
    """FastAPI dependency returning the configured oracle."""
    return OracleFactory.get_oracle(ORACLE_PROVIDER)


def raise_for_error(error: OperationError) -> NoReturn:
    """Translate a command failure into the matching HTTP error."""
    raise HTTPException(
        status_code=ERROR_STATUS_CODES[error.kind],
        detail=error.message
    )
