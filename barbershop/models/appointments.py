"""
Appointment model - a client booking a service, optionally with a professional.
"""
from datetime import datetime, timezone
from decimal import Decimal
from typing import Optional
import enum

from sqlalchemy import (
    String,
    Numeric,
    Integer,
    DateTime,
    ForeignKey,
    Index,
    Enum as SQLEnum,
    text,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from barbershop.lib.db import Base
from barbershop.models.services import Service
from barbershop.models.professionals import Professional


class AppointmentStatus(str, enum.Enum):
    """
    Appointment status.
    Plain data field: any status may be set to any other.
    """
    SCHEDULED = "scheduled"
    PENDING = "pending"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


# Cancelled rows release their slot
_OCCUPIES_SLOT = text("status <> 'cancelled'")

SLOT_INDEX = "uq_appointments_professional_slot"
# Postgres reports the index name on a violation, SQLite its column list
SLOT_CONSTRAINTS = (SLOT_INDEX, "appointments.appointment_date, appointments.professional_id")


class Appointment(Base):
    """
    Appointment entity - one booked slot.

    total_value is a snapshot of the price agreed at booking time and is
    stored, never derived from the service's current price.
    """
    __tablename__ = "appointments"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    # Client
    client_name: Mapped[str] = mapped_column(String(255), nullable=False)
    client_phone: Mapped[str] = mapped_column(String(20), nullable=False)

    # Relationships
    service_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("services.id", ondelete="RESTRICT"),
        nullable=False,
        index=True,
    )
    professional_id: Mapped[Optional[int]] = mapped_column(
        Integer,
        ForeignKey("professionals.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )

    # The slot: an exact instant
    appointment_date: Mapped[datetime] = mapped_column(
        DateTime(timezone=False),
        nullable=False,
        index=True,
    )

    status: Mapped[AppointmentStatus] = mapped_column(
        SQLEnum(
            AppointmentStatus,
            name="appointment_status",
            values_callable=lambda e: [member.value for member in e],
        ),
        nullable=False,
        default=AppointmentStatus.SCHEDULED,
        index=True,
    )
    total_value: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)

    # Timestamps
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )

    service: Mapped[Service] = relationship(lazy="joined")
    professional: Mapped[Optional[Professional]] = relationship(lazy="joined")

    __table_args__ = (
        # One live booking per professional per instant. Bookings without a
        # professional are checked globally by the availability service.
        Index(
            SLOT_INDEX,
            "appointment_date",
            "professional_id",
            unique=True,
            postgresql_where=_OCCUPIES_SLOT,
            sqlite_where=_OCCUPIES_SLOT,
        ),
    )

    def __repr__(self) -> str:
        return (
            f"<Appointment(id={self.id}, date={self.appointment_date}, "
            f"status={self.status}, professional_id={self.professional_id})>"
        )
