"""
Appointments API routes.

Provides:
- GET /appointments?date=: list, optional calendar-day filter
- GET /appointments/days-with-appointments?start&end: days that have bookings
- GET /appointments/stats, /revenue/monthly, /revenue/services?year&month
- GET /appointments/by-date/{date}, /by-professional/{professional_id}?date=
- GET|PUT|DELETE /appointments/{id}, POST /appointments

Every appointment is returned as a joined view carrying the service's name,
description, price and duration and the professional's name.
"""
from datetime import date, datetime
from decimal import Decimal
from typing import Dict, List, Optional

from fastapi import APIRouter, Depends, Query, status
from pydantic import BaseModel, Field

from barbershop.api.dependencies import get_appointment_service, get_reports
from barbershop.lib.logging import get_logger
from barbershop.models.appointments import Appointment, AppointmentStatus
from barbershop.services.appointment_service import AppointmentService
from barbershop.services.reporting_service import ReportingService


logger = get_logger(__name__)
router = APIRouter(prefix="/appointments", tags=["appointments"])


# Request models
class AppointmentPayload(BaseModel):
    """
    Appointment fields as sent by the client.

    For POST, client_name, client_phone, service_id and appointment_date are
    required. For PUT, only the fields present in the body are changed.
    """
    client_name: Optional[str] = None
    client_phone: Optional[str] = None
    service_id: Optional[int] = None
    professional_id: Optional[int] = None
    appointment_date: Optional[datetime] = None
    status: Optional[AppointmentStatus] = None
    total_value: Optional[Decimal] = Field(
        default=None,
        ge=0,
        description="Defaults to the service's current price",
    )


# Response models
class AppointmentResponse(BaseModel):
    """Appointment joined with service and professional display fields."""
    id: int
    client_name: str
    client_phone: str
    service_id: int
    professional_id: Optional[int] = None
    appointment_date: datetime
    status: AppointmentStatus
    total_value: float
    service_name: str
    service_description: str
    service_price: float
    service_duration: int
    professional_name: Optional[str] = None

    @classmethod
    def from_model(cls, appointment: Appointment) -> "AppointmentResponse":
        service = appointment.service
        professional = appointment.professional
        return cls(
            id=appointment.id,
            client_name=appointment.client_name,
            client_phone=appointment.client_phone,
            service_id=appointment.service_id,
            professional_id=appointment.professional_id,
            appointment_date=appointment.appointment_date,
            status=appointment.status,
            total_value=float(appointment.total_value),
            service_name=service.name,
            service_description=service.description,
            service_price=float(service.price),
            service_duration=service.duration,
            professional_name=professional.name if professional else None,
        )


class AppointmentStatsResponse(BaseModel):
    total_appointments: int
    completed_appointments: int
    cancelled_appointments: int
    pending_appointments: int
    average_value: float = Field(description="Average total_value over all statuses")


class DailyRevenue(BaseModel):
    day: int
    date: str
    appointments_count: int
    daily_revenue: float


class ServiceRevenue(BaseModel):
    service_id: int
    service_name: str
    appointment_count: int
    total_revenue: float


class MessageResponse(BaseModel):
    message: str


def _views(appointments: List[Appointment]) -> List[AppointmentResponse]:
    return [AppointmentResponse.from_model(a) for a in appointments]


@router.get("", response_model=List[AppointmentResponse])
def list_appointments(
    day: Optional[date] = Query(None, alias="date", description="Only this calendar day (YYYY-MM-DD)"),
    appointments: AppointmentService = Depends(get_appointment_service),
) -> List[AppointmentResponse]:
    return _views(appointments.list_appointments(day))


@router.get("/days-with-appointments", response_model=List[str])
def days_with_appointments(
    start: Optional[date] = Query(None, description="First day (inclusive)"),
    end: Optional[date] = Query(None, description="Last day (inclusive)"),
    appointments: AppointmentService = Depends(get_appointment_service),
) -> List[str]:
    """Calendar days in [start, end] with at least one appointment, for the booking calendar."""
    return appointments.days_with_appointments(start, end)


@router.get("/stats", response_model=AppointmentStatsResponse)
def get_stats(
    year: Optional[int] = Query(None),
    month: Optional[int] = Query(None),
    reports: ReportingService = Depends(get_reports),
) -> AppointmentStatsResponse:
    logger.info(f"GET /appointments/stats (year={year}, month={month})")
    return AppointmentStatsResponse(**reports.get_stats(year, month))


@router.get("/revenue/monthly", response_model=List[DailyRevenue])
def get_monthly_revenue(
    year: Optional[int] = Query(None),
    month: Optional[int] = Query(None),
    reports: ReportingService = Depends(get_reports),
) -> List[DailyRevenue]:
    """Revenue of completed appointments per day of the month."""
    return [DailyRevenue(**row) for row in reports.get_monthly_revenue(year, month)]


@router.get("/revenue/services", response_model=List[ServiceRevenue])
def get_service_revenue(
    year: Optional[int] = Query(None),
    month: Optional[int] = Query(None),
    reports: ReportingService = Depends(get_reports),
) -> List[ServiceRevenue]:
    """Revenue of completed appointments per service, highest first."""
    return [ServiceRevenue(**row) for row in reports.get_service_revenue(year, month)]


@router.get("/by-date/{day}", response_model=List[AppointmentResponse])
def list_appointments_by_date(
    day: date,
    appointments: AppointmentService = Depends(get_appointment_service),
) -> List[AppointmentResponse]:
    return _views(appointments.list_by_date(day))


@router.get("/by-professional/{professional_id}", response_model=List[AppointmentResponse])
def list_appointments_by_professional(
    professional_id: int,
    day: Optional[date] = Query(None, alias="date"),
    appointments: AppointmentService = Depends(get_appointment_service),
) -> List[AppointmentResponse]:
    return _views(appointments.list_by_professional(professional_id, day))


@router.get("/{appointment_id}", response_model=AppointmentResponse)
def get_appointment(
    appointment_id: int,
    appointments: AppointmentService = Depends(get_appointment_service),
) -> AppointmentResponse:
    return AppointmentResponse.from_model(appointments.get_appointment(appointment_id))


@router.post("", response_model=AppointmentResponse, status_code=status.HTTP_201_CREATED)
def create_appointment(
    payload: AppointmentPayload,
    appointments: AppointmentService = Depends(get_appointment_service),
) -> AppointmentResponse:
    """
    Book an appointment.

    total_value defaults to the service's price at this moment. Fails with
    400 if the slot is taken, 404 if the service or professional is unknown
    or the professional is inactive.
    """
    logger.info("POST /appointments")
    appointment = appointments.create_appointment(payload.model_dump())
    return AppointmentResponse.from_model(appointment)


@router.put("/{appointment_id}", response_model=AppointmentResponse)
def update_appointment(
    appointment_id: int,
    payload: AppointmentPayload,
    appointments: AppointmentService = Depends(get_appointment_service),
) -> AppointmentResponse:
    appointment = appointments.update_appointment(
        appointment_id,
        payload.model_dump(exclude_unset=True),
    )
    return AppointmentResponse.from_model(appointment)


@router.delete("/{appointment_id}", response_model=MessageResponse)
def delete_appointment(
    appointment_id: int,
    appointments: AppointmentService = Depends(get_appointment_service),
) -> Dict[str, str]:
    return appointments.delete_appointment(appointment_id)
