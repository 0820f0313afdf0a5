"""
Appointment lifecycle: booking, rescheduling, cancelling and reading appointments.

Every booking goes through the same ordered checks: required input, then
referenced service/professional, then slot availability, then the write.
The slot check and the write share one transaction holding the slot lock.
"""
from datetime import date, datetime, time, timedelta
from typing import Any, Dict, List, Optional, Tuple

from sqlalchemy import select
from sqlalchemy.orm import Session

from barbershop.api.middleware.error_handler import (
    ConflictException,
    NotFoundException,
    ValidationException,
)
from barbershop.lib.logging import get_logger
from barbershop.lib.metrics import get_metrics_collector
from barbershop.models.appointments import SLOT_CONSTRAINTS, Appointment, AppointmentStatus
from barbershop.models.professionals import Professional
from barbershop.models.services import Service
from barbershop.services.availability_service import reserve_slot, to_slot
from barbershop.services.catalog_service import ProfessionalDirectory, ServiceCatalog
from barbershop.services.helpers import require_fields, transaction, validate_changes

logger = get_logger(__name__)


REQUIRED_FIELDS = ("client_name", "client_phone", "service_id", "appointment_date")
UPDATABLE_FIELDS = (
    "client_name",
    "client_phone",
    "service_id",
    "professional_id",
    "appointment_date",
    "status",
    "total_value",
)
# professional_id: null unassigns; total_value: null re-prices from the service
NULLABLE_FIELDS = ("professional_id", "total_value")
SLOT_TAKEN = "This time slot is not available"


def day_bounds(day: date) -> Tuple[datetime, Optional[datetime]]:
    """
    Half-open [start, end) datetime range covering one calendar day.

    ``end`` is None for the last representable day, which has no next day.
    """
    start = datetime.combine(day, time.min)
    if day == date.max:
        return start, None
    return start, start + timedelta(days=1)


def _between(start: datetime, end: Optional[datetime]) -> tuple:
    criteria = (Appointment.appointment_date >= start,)
    if end is not None:
        criteria += (Appointment.appointment_date < end,)
    return criteria


def _parse_status(value: Any) -> AppointmentStatus:
    try:
        return AppointmentStatus(value)
    except ValueError:
        raise ValidationException(
            "Invalid appointment status",
            errors={"status": [s.value for s in AppointmentStatus]},
        )


class AppointmentService:
    """
    Orchestrates appointment create/update/delete and the joined reads.

    Returned Appointment objects have ``service`` and ``professional``
    loaded, which is what the API renders as the denormalized view.
    """

    def __init__(self, db: Session):
        self.db = db
        self.services = ServiceCatalog(db)
        self.professionals = ProfessionalDirectory(db)
        self.metrics = get_metrics_collector()

    # ===== Reads =====

    def _list(self, *criteria) -> List[Appointment]:
        stmt = (
            select(Appointment)
            .where(*criteria)
            .order_by(Appointment.appointment_date, Appointment.id)
        )
        return list(self.db.execute(stmt).scalars().all())

    @staticmethod
    def _on_day(day: date) -> tuple:
        return _between(*day_bounds(day))

    def list_appointments(self, day: Optional[date] = None) -> List[Appointment]:
        """All appointments ordered by date, optionally limited to one calendar day."""
        return self._list(*self._on_day(day)) if day else self._list()

    def list_by_date(self, day: date) -> List[Appointment]:
        return self._list(*self._on_day(day))

    def list_by_professional(
        self,
        professional_id: int,
        day: Optional[date] = None,
    ) -> List[Appointment]:
        """Appointments of one professional (active or not), optionally on one day."""
        self.professionals.get_professional(professional_id)
        criteria = [Appointment.professional_id == professional_id]
        if day:
            criteria.extend(self._on_day(day))
        return self._list(*criteria)

    def get_appointment(self, appointment_id: int) -> Appointment:
        appointment = self.db.get(Appointment, appointment_id)
        if appointment is None:
            raise NotFoundException("Appointment", appointment_id)
        return appointment

    def days_with_appointments(
        self,
        start: Optional[date],
        end: Optional[date],
    ) -> List[str]:
        """
        Calendar dates between ``start`` and ``end`` (inclusive) that have
        at least one appointment of any status, as ISO strings.
        """
        if start is None or end is None:
            raise ValidationException("Start and end dates are required")
        if start > end:
            raise ValidationException(
                "Start date must not be after end date",
                errors={"start": start.isoformat(), "end": end.isoformat()},
            )

        range_start, _ = day_bounds(start)
        _, range_end = day_bounds(end)
        rows = self.db.execute(
            select(Appointment.appointment_date)
            .where(*_between(range_start, range_end))
            .order_by(Appointment.appointment_date)
        ).scalars()

        days = sorted({value.date() for value in rows})
        return [day.isoformat() for day in days]

    # ===== Writes =====

    def create_appointment(self, data: Dict[str, Any]) -> Appointment:
        """
        Book an appointment.

        Args:
            data: client_name, client_phone, service_id, appointment_date
                (required); professional_id, status, total_value (optional)

        Returns:
            The new appointment with service and professional loaded

        Raises:
            ValidationException: Missing required field or unknown status
            NotFoundException: Unknown service, or professional missing/inactive
            ConflictException: Slot already taken
        """
        require_fields(data, REQUIRED_FIELDS)
        status = _parse_status(data.get("status") or AppointmentStatus.SCHEDULED)
        appointment_date = to_slot(data["appointment_date"])

        service = self.services.get_service(data["service_id"])
        professional: Optional[Professional] = None
        if data.get("professional_id") is not None:
            professional = self.professionals.get_active_professional(data["professional_id"])

        # Snapshot of the price at booking time
        total_value = data.get("total_value")
        if total_value is None:
            total_value = service.price

        with transaction(
            self.db,
            "create appointment",
            conflict_message=SLOT_TAKEN,
            conflict_on=SLOT_CONSTRAINTS,
        ):
            if not reserve_slot(self.db, appointment_date, professional.id if professional else None):
                self._reject("create", appointment_date, professional)

            appointment = Appointment(
                client_name=data["client_name"],
                client_phone=data["client_phone"],
                service=service,
                professional=professional,
                appointment_date=appointment_date,
                status=status,
                total_value=total_value,
            )
            self.db.add(appointment)

        self.metrics.increment_created(status=status.value)
        logger.info(
            "Appointment created",
            extra={
                "appointment_id": appointment.id,
                "service_id": service.id,
                "professional_id": appointment.professional_id,
                "appointment_date": appointment_date.isoformat(),
                "total_value": str(total_value),
            }
        )
        return appointment

    def update_appointment(self, appointment_id: int, changes: Dict[str, Any]) -> Appointment:
        """
        Apply a partial update.

        ``changes`` must contain only the fields the caller sent. Changing the
        service without a total_value re-prices the appointment from the new
        service. Moving the appointment (date, professional or reactivating a
        cancelled one) re-checks the target slot, ignoring the appointment
        itself.

        Raises:
            ValidationException: No fields, or a required field cleared
            NotFoundException: Unknown appointment/service/professional
            ConflictException: Target slot already taken
        """
        changes = {k: v for k, v in changes.items() if k in UPDATABLE_FIELDS}
        validate_changes(changes, nullable=NULLABLE_FIELDS)
        appointment = self.get_appointment(appointment_id)

        service: Service = appointment.service
        if "service_id" in changes:
            service = self.services.get_service(changes["service_id"])

        professional: Optional[Professional] = appointment.professional
        if "professional_id" in changes:
            new_professional_id = changes["professional_id"]
            if new_professional_id is None:
                professional = None
            elif new_professional_id != appointment.professional_id:
                professional = self.professionals.get_active_professional(new_professional_id)

        status = _parse_status(changes["status"]) if "status" in changes else appointment.status
        appointment_date = (
            to_slot(changes["appointment_date"])
            if "appointment_date" in changes
            else appointment.appointment_date
        )

        total_value = appointment.total_value
        if changes.get("total_value") is not None:
            total_value = changes["total_value"]
        elif "service_id" in changes or "total_value" in changes:
            total_value = service.price

        new_professional_id = professional.id if professional else None
        moved = (
            appointment_date != appointment.appointment_date
            or new_professional_id != appointment.professional_id
            or status != appointment.status
        )

        with transaction(
            self.db,
            "update appointment",
            conflict_message=SLOT_TAKEN,
            conflict_on=SLOT_CONSTRAINTS,
        ):
            if moved and status != AppointmentStatus.CANCELLED:
                if not reserve_slot(
                    self.db,
                    appointment_date,
                    new_professional_id,
                    excluding_appointment_id=appointment.id,
                ):
                    self._reject("update", appointment_date, professional)

            if "client_name" in changes:
                appointment.client_name = changes["client_name"]
            if "client_phone" in changes:
                appointment.client_phone = changes["client_phone"]
            appointment.service = service
            appointment.professional = professional
            appointment.appointment_date = appointment_date
            appointment.status = status
            appointment.total_value = total_value

        self.metrics.increment_updated()
        logger.info(
            "Appointment updated",
            extra={"appointment_id": appointment_id, "fields": sorted(changes)},
        )
        return appointment

    def delete_appointment(self, appointment_id: int) -> Dict[str, str]:
        """Hard-delete an appointment."""
        appointment = self.get_appointment(appointment_id)

        with transaction(self.db, "delete appointment"):
            self.db.delete(appointment)

        self.metrics.increment_deleted()
        logger.info("Appointment deleted", extra={"appointment_id": appointment_id})
        return {"message": "Appointment deleted successfully"}

    def _reject(
        self,
        operation: str,
        appointment_date: datetime,
        professional: Optional[Professional],
    ) -> None:
        self.metrics.increment_conflicts(operation=operation)
        logger.warning(
            "Booking rejected, slot taken",
            extra={
                "operation": operation,
                "appointment_date": appointment_date.isoformat(),
                "professional_id": professional.id if professional else None,
            }
        )
        raise ConflictException(
            SLOT_TAKEN,
            details={
                "appointment_date": appointment_date.isoformat(),
                "professional_id": professional.id if professional else None,
            },
        )
