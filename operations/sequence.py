import re
from sqlmodel import Session, select
from models.boards import Task
from .contract import CASE_NUMBER_PREFIX

CASE_NUMBER_PATTERN = re.compile(rf"{re.escape(CASE_NUMBER_PREFIX)}([0-9]+)")


def parse_case_number(case_number: str):
    """Numeric suffix of a TASK-<n> identifier, or None when malformed."""
    match = CASE_NUMBER_PATTERN.fullmatch(case_number)
    return int(match.group(1)) if match else None


def next_case_number(db_session: Session) -> int:
    """
    Next free task number: one above the highest TASK-<n> in use, 1 if none.

    The value is a hint for the oracle prompt; creation still checks for
    collisions.
    """
    case_numbers = db_session.exec(
        select(Task.case_number).where(Task.case_number.startswith(CASE_NUMBER_PREFIX))
    ).all()

    numbers = [
        number for number in (parse_case_number(value) for value in case_numbers)
        if number is not None
    ]
    return max(numbers) + 1 if numbers else 1
