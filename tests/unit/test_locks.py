"""
Unit tests for slot lock keys and advisory lock handling.
"""
from datetime import datetime
from unittest.mock import MagicMock

import pytest

from barbershop.lib.locks import acquire_slot_lock, get_lock_key, slot_lock_key, supports_advisory_locks


@pytest.mark.unit
def test_lock_key_is_deterministic_and_in_bigint_range():
    """Test the same name always yields the same positive bigint key."""
    key = get_lock_key("appointment-slot:2024-06-01T10:00:00")

    assert key == get_lock_key("appointment-slot:2024-06-01T10:00:00")
    assert 0 <= key <= 2**63 - 1


@pytest.mark.unit
def test_slot_lock_key_depends_only_on_instant():
    """Test different instants map to different keys."""
    first = slot_lock_key(datetime(2024, 6, 1, 10, 0))
    second = slot_lock_key(datetime(2024, 6, 1, 10, 30))

    assert first == slot_lock_key(datetime(2024, 6, 1, 10, 0))
    assert first != second


@pytest.mark.unit
def test_sqlite_session_skips_advisory_lock(db_session):
    """Test SQLite sessions report no advisory lock support and skip the lock."""
    assert supports_advisory_locks(db_session) is False
    assert acquire_slot_lock(db_session, datetime(2024, 6, 1, 10, 0)) is False


@pytest.mark.unit
def test_postgres_session_takes_transaction_lock():
    """Test a Postgres session issues pg_advisory_xact_lock with the slot key."""
    db = MagicMock()
    db.get_bind.return_value.dialect.name = "postgresql"
    slot = datetime(2024, 6, 1, 10, 0)

    assert acquire_slot_lock(db, slot) is True

    statement, params = db.execute.call_args.args
    assert "pg_advisory_xact_lock" in str(statement)
    assert params == {"lock_key": slot_lock_key(slot)}
