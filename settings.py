"""
Application settings and logging.

Values are read from environment variables once at import time.
"""

import os
import logging

ENVIRONMENT = os.getenv("ENVIRONMENT", "development")
DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./kaiban.db")

GEMINI_API_KEY = os.getenv("GEMINI_API_KEY") or os.getenv("GOOGLE_GEMINI_API_KEY", "")
GEMINI_MODEL = os.getenv("GEMINI_MODEL", "gemini-2.5-flash")
GEMINI_API_ROOT = os.getenv(
    "GEMINI_API_ROOT",
    "https://generativelanguage.googleapis.com/v1beta/models"
)
ORACLE_PROVIDER = os.getenv("ORACLE_PROVIDER", "gemini")
ORACLE_TIMEOUT_SECONDS = float(os.getenv("ORACLE_TIMEOUT_SECONDS", "30"))

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

# Attributes every LogRecord carries; anything else came in through extra={...}
_RESERVED_RECORD_ATTRS = set(vars(logging.LogRecord("", 0, "", 0, "", None, None))) | {"message", "asctime"}


class ContextFormatter(logging.Formatter):
    """Formatter that appends values passed through `extra` as key=value pairs."""

    def format(self, record: logging.LogRecord) -> str:
        line = super().format(record)
        context = {
            key: value for key, value in vars(record).items()
            if key not in _RESERVED_RECORD_ATTRS
        }
        if context:
            pairs = " ".join(f"{key}={value!r}" for key, value in sorted(context.items()))
            line = f"{line} | {pairs}"
        return line


def _build_logger() -> logging.Logger:
    kaiban_logger = logging.getLogger("kaiban")
    if not kaiban_logger.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(ContextFormatter("%(asctime)s %(levelname)s %(name)s: %(message)s"))
        kaiban_logger.addHandler(handler)
    kaiban_logger.setLevel(LOG_LEVEL)
    return kaiban_logger


logger = _build_logger()
