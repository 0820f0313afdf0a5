"""
Availability checks for appointment slots.

A slot is an exact ``appointment_date`` instant. Cancelled appointments never
occupy a slot. With a professional, only that professional's bookings
conflict; without one, any live booking at the instant blocks the slot.
"""
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import select
from sqlalchemy.orm import Session

from barbershop.lib.locks import acquire_slot_lock
from barbershop.lib.logging import get_logger
from barbershop.models.appointments import Appointment, AppointmentStatus

logger = get_logger(__name__)


def to_slot(value: datetime) -> datetime:
    """
    Normalize an appointment instant for storage and comparison.

    Appointments are stored as naive timestamps; aware values are converted
    to UTC first so the same instant always maps to the same slot.
    """
    if value.tzinfo is not None:
        value = value.astimezone(timezone.utc).replace(tzinfo=None)
    return value


def is_slot_available(
    db: Session,
    appointment_date: datetime,
    professional_id: Optional[int] = None,
    excluding_appointment_id: Optional[int] = None,
) -> bool:
    """
    Check whether a slot is free.

    Args:
        db: Database session
        appointment_date: Candidate instant (exact match, no tolerance window)
        professional_id: Restrict the search to this professional's bookings
        excluding_appointment_id: Ignore this appointment (the one being updated)

    Returns:
        True if no other live appointment occupies the slot
    """
    stmt = select(Appointment.id).where(
        Appointment.appointment_date == to_slot(appointment_date),
        Appointment.status != AppointmentStatus.CANCELLED,
    )
    if professional_id is not None:
        stmt = stmt.where(Appointment.professional_id == professional_id)
    if excluding_appointment_id is not None:
        stmt = stmt.where(Appointment.id != excluding_appointment_id)

    conflict = db.execute(stmt.limit(1)).scalar_one_or_none()
    if conflict is not None:
        logger.info(
            "Slot is taken",
            extra={
                "appointment_date": appointment_date.isoformat(),
                "professional_id": professional_id,
                "conflicting_appointment_id": conflict,
            }
        )
        return False
    return True


def reserve_slot(
    db: Session,
    appointment_date: datetime,
    professional_id: Optional[int] = None,
    excluding_appointment_id: Optional[int] = None,
) -> bool:
    """
    Lock the slot for the current transaction, then check it.

    Must run inside the transaction that writes the appointment so the lock
    is held until that write commits.
    """
    acquire_slot_lock(db, to_slot(appointment_date))
    return is_slot_available(db, appointment_date, professional_id, excluding_appointment_id)
