"""
Shared helpers for the service layer: field presence checks and the
commit/rollback wrapper every mutating operation runs inside.
"""
from contextlib import contextmanager
from typing import Any, Dict, Generator, Iterable, List, Optional

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from barbershop.api.middleware.error_handler import (
    AppException,
    ConflictException,
    StoreException,
    ValidationException,
)
from barbershop.lib.logging import get_logger

logger = get_logger(__name__)


def is_blank(value: Any) -> bool:
    """None or a string with nothing but whitespace."""
    return value is None or (isinstance(value, str) and not value.strip())


def require_fields(data: Dict[str, Any], fields: Iterable[str]) -> None:
    """
    Raise ValidationException unless every field is present and non-blank.

    Numeric zero counts as present.
    """
    missing = [field for field in fields if is_blank(data.get(field))]
    if missing:
        raise ValidationException(
            "Please provide all required fields",
            errors={"missing": missing},
        )


def validate_changes(
    changes: Dict[str, Any],
    nullable: Iterable[str] = (),
) -> None:
    """
    Validate a partial update.

    ``changes`` holds only the fields the caller actually sent, so a falsy
    value such as ``0`` is a real change. At least one field is required,
    and only ``nullable`` fields may be cleared.
    """
    if not changes:
        raise ValidationException("Please provide at least one field to update")

    allowed_null = set(nullable)
    invalid: List[str] = [
        field for field, value in changes.items()
        if field not in allowed_null and is_blank(value)
    ]
    if invalid:
        raise ValidationException(
            "Fields cannot be empty",
            errors={"invalid": invalid},
        )


def violates(exc: IntegrityError, constraints: Iterable[str]) -> bool:
    """True if the driver error names one of ``constraints``."""
    detail = str(exc.orig)
    return any(constraint in detail for constraint in constraints)


@contextmanager
def transaction(
    db: Session,
    operation: str,
    conflict_message: Optional[str] = None,
    conflict_on: Iterable[str] = (),
) -> Generator[Session, None, None]:
    """
    Run a block of writes as one unit and commit it.

    Application errors roll back and propagate unchanged. An IntegrityError
    that names one of ``conflict_on`` becomes a ConflictException carrying
    ``conflict_message``; every other database error becomes a
    StoreException with the cause logged.
    """
    try:
        yield db
        db.commit()
    except AppException:
        db.rollback()
        raise
    except IntegrityError as exc:
        db.rollback()
        if conflict_message and violates(exc, conflict_on):
            logger.warning(
                f"Integrity conflict during {operation}",
                extra={"operation": operation, "error": str(exc.orig)},
            )
            raise ConflictException(conflict_message) from exc
        logger.error(f"Integrity error during {operation}", exc_info=True)
        raise StoreException() from exc
    except SQLAlchemyError as exc:
        db.rollback()
        logger.error(f"Database error during {operation}", exc_info=True)
        raise StoreException() from exc
