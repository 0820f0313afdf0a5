"""
Postgres advisory locks for serializing slot reservations.

Two requests booking the same instant both run "check availability, then
insert". Taking a transaction-scoped advisory lock keyed by the slot before
the check makes the second request wait until the first one commits or
rolls back, so its availability check sees the first booking.

The lock is released automatically at the end of the transaction. Backends
without advisory locks (SQLite in tests) skip it; the partial unique index on
appointments remains the last line of enforcement there.
"""
import hashlib
from datetime import datetime

from sqlalchemy import text
from sqlalchemy.orm import Session

from barbershop.lib.logging import get_logger

logger = get_logger(__name__)


def get_lock_key(name: str) -> int:
    """
    Generate a consistent integer lock key for pg_advisory_xact_lock.

    Args:
        name: Lock identifier string

    Returns:
        Integer lock key (positive, within bigint range)
    """
    hash_bytes = hashlib.sha256(name.encode()).digest()[:8]
    lock_key = int.from_bytes(hash_bytes, byteorder='big', signed=False)
    # Convert to signed int64 range (Postgres bigint)
    if lock_key > 2**63 - 1:
        lock_key = lock_key - 2**64
    return abs(lock_key)


def slot_lock_key(appointment_date: datetime) -> int:
    """Lock key shared by every booking attempt at the same instant."""
    return get_lock_key(f"appointment-slot:{appointment_date.isoformat()}")


def supports_advisory_locks(db: Session) -> bool:
    return db.get_bind().dialect.name == "postgresql"


def acquire_slot_lock(db: Session, appointment_date: datetime) -> bool:
    """
    Block until the slot lock for ``appointment_date`` is held by this transaction.

    The key covers the instant, not the professional: a booking without a
    professional conflicts with every booking at that instant, so all of them
    must queue on the same lock.

    Returns:
        True if a lock was taken, False if the backend has no advisory locks
    """
    if not supports_advisory_locks(db):
        return False

    lock_key = slot_lock_key(appointment_date)
    db.execute(
        text("SELECT pg_advisory_xact_lock(:lock_key)"),
        {"lock_key": lock_key}
    )
    logger.debug(
        "Acquired slot lock",
        extra={"appointment_date": appointment_date.isoformat(), "lock_key": lock_key}
    )
    return True
