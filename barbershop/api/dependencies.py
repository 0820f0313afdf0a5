"""
API dependencies for FastAPI dependency injection.

Each request gets its own database session; the service objects below are
built on top of it.
"""
from fastapi import Depends
from sqlalchemy.orm import Session

from barbershop.lib.db import get_db as get_db_session
from barbershop.services.appointment_service import AppointmentService
from barbershop.services.catalog_service import ProfessionalDirectory, ServiceCatalog
from barbershop.services.reporting_service import ReportingService, get_reporting_service


# Re-export get_db for convenience
get_db = get_db_session


def get_service_catalog(db: Session = Depends(get_db)) -> ServiceCatalog:
    return ServiceCatalog(db)


def get_professional_directory(db: Session = Depends(get_db)) -> ProfessionalDirectory:
    return ProfessionalDirectory(db)


def get_appointment_service(db: Session = Depends(get_db)) -> AppointmentService:
    return AppointmentService(db)


def get_reports(db: Session = Depends(get_db)) -> ReportingService:
    return get_reporting_service(db)
