import secrets
import string
from datetime import datetime, timezone
from typing import Callable

_ALPHABET = string.ascii_lowercase + string.digits


def id_generator(prefix: str, length: int) -> Callable[[], str]:
    """Build a default_factory producing ids like `board_k3j9x0a1bq`."""

    def generate() -> str:
        suffix = "".join(secrets.choice(_ALPHABET) for _ in range(length))
        return f"{prefix}_{suffix}"

    return generate


def utcnow() -> datetime:
    return datetime.now(timezone.utc)
