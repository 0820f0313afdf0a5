"""
SQLAlchemy models package.
Import all models here to ensure they're registered with Base.metadata.
"""
from barbershop.models.services import Service
from barbershop.models.professionals import Professional, ProfessionalStatus, professional_services
from barbershop.models.appointments import Appointment, AppointmentStatus

__all__ = [
    "Service",
    "Professional",
    "ProfessionalStatus",
    "professional_services",
    "Appointment",
    "AppointmentStatus",
]
