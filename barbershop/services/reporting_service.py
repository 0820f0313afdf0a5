"""
ReportingService - monthly statistics and revenue for the shop dashboard.

Provides:
- Appointment counts by status and average value for a month
- Daily revenue of completed appointments
- Revenue per service of completed appointments

Revenue only counts completed appointments, at the total_value captured
when each one was booked.
"""
from datetime import date, datetime
from decimal import Decimal
from typing import Any, Dict, List, Optional, Tuple

from sqlalchemy import select, func, case, extract
from sqlalchemy.orm import Session

from barbershop.api.middleware.error_handler import ValidationException
from barbershop.lib.logging import get_logger
from barbershop.models.appointments import Appointment, AppointmentStatus
from barbershop.models.services import Service

logger = get_logger(__name__)


def _money(value: Any) -> float:
    """Round a SUM/AVG result (Decimal, float or None) to cents."""
    if value is None:
        return 0.0
    return float(round(Decimal(str(value)), 2))


def month_bounds(year: Optional[int], month: Optional[int]) -> Tuple[datetime, Optional[datetime]]:
    """
    Half-open [start, end) range for a calendar month.

    ``end`` is None for December 9999, the last representable month.

    Raises:
        ValidationException: Year or month missing, or month outside 1..12
    """
    if year is None or month is None:
        raise ValidationException("Year and month are required")
    if not 1 <= month <= 12:
        raise ValidationException("Month must be between 1 and 12", errors={"month": month})
    if not 1 <= year <= 9999:
        raise ValidationException("Invalid year", errors={"year": year})

    start = datetime(year, month, 1)
    if month < 12:
        return start, datetime(year, month + 1, 1)
    if year < datetime.max.year:
        return start, datetime(year + 1, 1, 1)
    return start, None


class ReportingService:
    """Read-only aggregates over appointments in a calendar month."""

    def __init__(self, db: Session):
        self.db = db

    @staticmethod
    def _in_month(start: datetime, end: Optional[datetime]) -> tuple:
        if end is None:
            return (Appointment.appointment_date >= start,)
        return (Appointment.appointment_date >= start, Appointment.appointment_date < end)

    def get_stats(self, year: Optional[int], month: Optional[int]) -> Dict[str, Any]:
        """
        Counts by status and average value for every appointment in the month.

        average_value averages total_value across all statuses, cancelled
        included.

        Returns:
            {
                'total_appointments': int,
                'completed_appointments': int,
                'cancelled_appointments': int,
                'pending_appointments': int,
                'average_value': float,
            }
        """
        start, end = month_bounds(year, month)

        def count_status(status: AppointmentStatus):
            return func.coalesce(
                func.sum(case((Appointment.status == status, 1), else_=0)), 0
            )

        row = self.db.execute(
            select(
                func.count(Appointment.id),
                count_status(AppointmentStatus.COMPLETED),
                count_status(AppointmentStatus.CANCELLED),
                count_status(AppointmentStatus.PENDING),
                func.avg(Appointment.total_value),
            ).where(*self._in_month(start, end))
        ).one()

        stats = {
            'total_appointments': int(row[0] or 0),
            'completed_appointments': int(row[1] or 0),
            'cancelled_appointments': int(row[2] or 0),
            'pending_appointments': int(row[3] or 0),
            'average_value': _money(row[4]),
        }
        logger.info(f"Stats computed for {year}-{month:02d}", extra=stats)
        return stats

    def get_monthly_revenue(self, year: Optional[int], month: Optional[int]) -> List[Dict[str, Any]]:
        """
        Completed appointments per day of the month.

        Returns:
            [{'day': int, 'date': 'YYYY-MM-DD', 'appointments_count': int,
              'daily_revenue': float}, ...] ordered by day, days without
            completed appointments omitted
        """
        start, end = month_bounds(year, month)
        day = extract("day", Appointment.appointment_date)

        rows = self.db.execute(
            select(
                day.label("day"),
                func.count(Appointment.id).label("appointments_count"),
                func.sum(Appointment.total_value).label("daily_revenue"),
            )
            .where(
                *self._in_month(start, end),
                Appointment.status == AppointmentStatus.COMPLETED,
            )
            .group_by(day)
            .order_by(day)
        ).all()

        return [
            {
                'day': int(row.day),
                'date': date(start.year, start.month, int(row.day)).isoformat(),
                'appointments_count': int(row.appointments_count),
                'daily_revenue': _money(row.daily_revenue),
            }
            for row in rows
        ]

    def get_service_revenue(self, year: Optional[int], month: Optional[int]) -> List[Dict[str, Any]]:
        """
        Completed appointments per service, highest revenue first.

        Returns:
            [{'service_id': int, 'service_name': str, 'appointment_count': int,
              'total_revenue': float}, ...]
        """
        start, end = month_bounds(year, month)
        total_revenue = func.sum(Appointment.total_value).label("total_revenue")

        rows = self.db.execute(
            select(
                Service.id.label("service_id"),
                Service.name.label("service_name"),
                func.count(Appointment.id).label("appointment_count"),
                total_revenue,
            )
            .select_from(Appointment)
            .join(Service, Appointment.service_id == Service.id)
            .where(
                *self._in_month(start, end),
                Appointment.status == AppointmentStatus.COMPLETED,
            )
            .group_by(Service.id, Service.name)
            .order_by(total_revenue.desc(), Service.id)
        ).all()

        return [
            {
                'service_id': row.service_id,
                'service_name': row.service_name,
                'appointment_count': int(row.appointment_count),
                'total_revenue': _money(row.total_revenue),
            }
            for row in rows
        ]


def get_reporting_service(db: Session) -> ReportingService:
    """
    Get ReportingService instance.

    Args:
        db: Database session

    Returns:
        ReportingService instance
    """
    return ReportingService(db)
