"""
Catalog store: services on the price list and the professionals who perform them.

Provides:
- ServiceCatalog: CRUD for services; deletion is refused while appointments
  still reference the service
- ProfessionalDirectory: CRUD for professionals with soft delete, email
  uniqueness and full replacement of the service association set
"""
from decimal import Decimal
from typing import Any, Dict, List, Optional

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from barbershop.api.middleware.error_handler import (
    ConflictException,
    NotFoundException,
    ValidationException,
)
from barbershop.lib.logging import get_logger
from barbershop.models.appointments import Appointment
from barbershop.models.professionals import EMAIL_CONSTRAINTS, Professional, ProfessionalStatus
from barbershop.models.services import Service
from barbershop.services.helpers import require_fields, transaction, validate_changes

logger = get_logger(__name__)


SERVICE_FIELDS = ("name", "description", "price", "duration")
PROFESSIONAL_REQUIRED_FIELDS = ("name", "email", "phone")
EMAIL_IN_USE = "Email already in use by another professional"


def _check_service_values(data: Dict[str, Any]) -> None:
    errors = {}
    if data.get("price") is not None and Decimal(str(data["price"])) < 0:
        errors["price"] = "must be greater than or equal to 0"
    if data.get("duration") is not None and int(data["duration"]) <= 0:
        errors["duration"] = "must be a positive number of minutes"
    if errors:
        raise ValidationException("Invalid service values", errors=errors)


def _parse_status(value: Any) -> ProfessionalStatus:
    try:
        return ProfessionalStatus(value)
    except ValueError:
        raise ValidationException(
            "Invalid professional status",
            errors={"status": [s.value for s in ProfessionalStatus]},
        )


class ServiceCatalog:
    """Data access for services."""

    def __init__(self, db: Session):
        self.db = db

    def list_services(self) -> List[Service]:
        return list(self.db.execute(select(Service).order_by(Service.id)).scalars().all())

    def get_service(self, service_id: int) -> Service:
        service = self.db.get(Service, service_id)
        if service is None:
            raise NotFoundException("Service", service_id)
        return service

    def create_service(self, data: Dict[str, Any]) -> Service:
        """
        Create a service.

        Args:
            data: name, description, price, duration (all required)

        Raises:
            ValidationException: Missing field, negative price or non-positive duration
        """
        require_fields(data, SERVICE_FIELDS)
        _check_service_values(data)

        service = Service(**{field: data[field] for field in SERVICE_FIELDS})
        with transaction(self.db, "create service"):
            self.db.add(service)

        logger.info("Service created", extra={"service_id": service.id, "service_name": service.name})
        return service

    def update_service(self, service_id: int, changes: Dict[str, Any]) -> Service:
        """
        Apply a partial update. Only the fields present in ``changes`` are written.
        """
        changes = {k: v for k, v in changes.items() if k in SERVICE_FIELDS}
        validate_changes(changes)
        _check_service_values(changes)
        service = self.get_service(service_id)

        with transaction(self.db, "update service"):
            for field, value in changes.items():
                setattr(service, field, value)

        logger.info(
            "Service updated",
            extra={"service_id": service_id, "fields": sorted(changes)},
        )
        return service

    def delete_service(self, service_id: int) -> Dict[str, str]:
        """
        Hard-delete a service.

        Raises:
            NotFoundException: Unknown service
            ConflictException: Appointments still reference the service
        """
        service = self.get_service(service_id)

        references = self.db.execute(
            select(func.count(Appointment.id)).where(Appointment.service_id == service_id)
        ).scalar_one()
        if references:
            raise ConflictException(
                "Service is referenced by existing appointments",
                details={"service_id": service_id, "appointments": references},
            )

        with transaction(self.db, "delete service"):
            self.db.delete(service)

        logger.info("Service deleted", extra={"service_id": service_id})
        return {"message": "Service deleted successfully"}


class ProfessionalDirectory:
    """Data access for professionals and their service assignments."""

    def __init__(self, db: Session):
        self.db = db

    def list_professionals(self, active_only: bool = False) -> List[Professional]:
        stmt = select(Professional)
        if active_only:
            stmt = stmt.where(Professional.status == ProfessionalStatus.ACTIVE)
        stmt = stmt.order_by(Professional.name, Professional.id)
        return list(self.db.execute(stmt).scalars().all())

    def get_professional(self, professional_id: int) -> Professional:
        """Fetch a professional regardless of status."""
        professional = self.db.get(Professional, professional_id)
        if professional is None:
            raise NotFoundException("Professional", professional_id)
        return professional

    def get_active_professional(self, professional_id: int) -> Professional:
        """Fetch a professional that can take new bookings."""
        professional = self.db.get(Professional, professional_id)
        if professional is None or not professional.is_active:
            raise NotFoundException("Active professional", professional_id)
        return professional

    def _email_taken(self, email: str, excluding_id: Optional[int] = None) -> bool:
        stmt = select(Professional.id).where(Professional.email == email)
        if excluding_id is not None:
            stmt = stmt.where(Professional.id != excluding_id)
        return self.db.execute(stmt.limit(1)).first() is not None

    def _resolve_services(self, service_ids: List[int]) -> List[Service]:
        """Load services by id, keeping request order and dropping duplicates."""
        wanted = list(dict.fromkeys(service_ids))
        if not wanted:
            return []

        found = {
            service.id: service
            for service in self.db.execute(
                select(Service).where(Service.id.in_(wanted))
            ).scalars()
        }
        missing = [service_id for service_id in wanted if service_id not in found]
        if missing:
            raise NotFoundException("Service", ", ".join(str(m) for m in missing))
        return [found[service_id] for service_id in wanted]

    def create_professional(self, data: Dict[str, Any]) -> Professional:
        """
        Create a professional.

        Args:
            data: name, email, phone (required); status (default active);
                services (list of service ids)

        Raises:
            ValidationException: Missing field or unknown status
            NotFoundException: Unknown service id
            ConflictException: Email already in use
        """
        require_fields(data, PROFESSIONAL_REQUIRED_FIELDS)
        status = _parse_status(data.get("status") or ProfessionalStatus.ACTIVE)
        services = self._resolve_services(data.get("services") or [])

        if self._email_taken(data["email"]):
            raise ConflictException(EMAIL_IN_USE, details={"email": data["email"]})

        professional = Professional(
            name=data["name"],
            email=data["email"],
            phone=data["phone"],
            status=status,
            services=services,
        )
        with transaction(
            self.db,
            "create professional",
            conflict_message=EMAIL_IN_USE,
            conflict_on=EMAIL_CONSTRAINTS,
        ):
            self.db.add(professional)

        logger.info(
            "Professional created",
            extra={"professional_id": professional.id, "services": professional.service_ids},
        )
        return professional

    def update_professional(self, professional_id: int, changes: Dict[str, Any]) -> Professional:
        """
        Apply a partial update.

        When ``services`` is present the association set is replaced
        wholesale. Field changes and the new association set are committed
        together.
        """
        changes = {
            k: v for k, v in changes.items()
            if k in PROFESSIONAL_REQUIRED_FIELDS + ("status", "services")
        }
        if changes.get("services", ...) is None:
            changes["services"] = []
        validate_changes(changes, nullable=("services",))

        professional = self.get_professional(professional_id)

        if "email" in changes and self._email_taken(changes["email"], excluding_id=professional_id):
            raise ConflictException(EMAIL_IN_USE, details={"email": changes["email"]})
        if "status" in changes:
            changes["status"] = _parse_status(changes["status"])
        services = self._resolve_services(changes.pop("services")) if "services" in changes else None

        with transaction(
            self.db,
            "update professional",
            conflict_message=EMAIL_IN_USE,
            conflict_on=EMAIL_CONSTRAINTS,
        ):
            for field, value in changes.items():
                setattr(professional, field, value)
            if services is not None:
                professional.services = services

        logger.info(
            "Professional updated",
            extra={"professional_id": professional_id, "services": professional.service_ids},
        )
        return professional

    def deactivate_professional(self, professional_id: int) -> Dict[str, str]:
        """Soft delete: the row stays, only the status changes."""
        professional = self.get_professional(professional_id)

        with transaction(self.db, "deactivate professional"):
            professional.status = ProfessionalStatus.INACTIVE

        logger.info("Professional deactivated", extra={"professional_id": professional_id})
        return {"message": "Professional deactivated successfully"}
