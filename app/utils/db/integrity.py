"""Translate database errors into the API error taxonomy."""

from __future__ import annotations

import re
from typing import List, NoReturn, Optional

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from app.exceptions import (
    ConversaError,
    DuplicateField,
    ForeignKeyViolation,
    Unexpected,
)
from app.infra.logging_config import get_logger

logger = get_logger("db")

# PostgreSQL SQLSTATE codes
UNIQUE_VIOLATION = "23505"
FOREIGN_KEY_VIOLATION = "23503"

_PG_KEY_DETAIL = re.compile(r"Key \((?P<columns>[^)]+)\)=")
_SQLITE_UNIQUE = re.compile(r"UNIQUE constraint failed: (?P<columns>.+)$")


def _pgcode(error: IntegrityError) -> Optional[str]:
    return getattr(error.orig, "pgcode", None)


def _message(error: IntegrityError) -> str:
    return str(error.orig) if error.orig is not None else str(error)


def is_unique_violation(error: IntegrityError) -> bool:
    code = _pgcode(error)
    if code is not None:
        return code == UNIQUE_VIOLATION
    return "UNIQUE constraint failed" in _message(error)


def is_foreign_key_violation(error: IntegrityError) -> bool:
    code = _pgcode(error)
    if code is not None:
        return code == FOREIGN_KEY_VIOLATION
    return "FOREIGN KEY constraint failed" in _message(error)


def duplicate_fields(error: IntegrityError) -> List[str]:
    """Column names involved in a unique violation, without table prefixes."""
    diag = getattr(error.orig, "diag", None)
    detail = getattr(diag, "message_detail", None) or ""
    match = _PG_KEY_DETAIL.search(detail)
    if match is None:
        match = _SQLITE_UNIQUE.search(_message(error).strip())
    if match is None:
        return []
    columns = [c.strip() for c in match.group("columns").split(",")]
    return [c.rsplit(".", 1)[-1] for c in columns if c]


def translate_integrity_error(error: IntegrityError) -> Optional[ConversaError]:
    """Map an IntegrityError to DuplicateField / ForeignKeyViolation, or None."""
    if is_unique_violation(error):
        return DuplicateField(duplicate_fields(error))
    if is_foreign_key_violation(error):
        return ForeignKeyViolation()
    return None


def rollback_and_raise(
    db: Session, error: SQLAlchemyError, message: str
) -> NoReturn:
    """
    Roll the session back and re-raise a persistence failure as an API error.

    Integrity errors with a known cause become DuplicateField or
    ForeignKeyViolation. Anything else becomes Unexpected(message).
    """
    db.rollback()
    if isinstance(error, IntegrityError):
        translated = translate_integrity_error(error)
        if translated is not None:
            logger.warning("%s: %s", message, translated.detail)
            raise translated from error
    logger.exception(message)
    raise Unexpected(message) from error
