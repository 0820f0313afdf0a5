"""
Shared fixtures.

Tests run against an in-memory SQLite database. DATABASE_URL must be set
before anything from barbershop is imported, because settings and the engine
are created at import time.
"""
import os

os.environ["DATABASE_URL"] = "sqlite+pysqlite:///:memory:"
os.environ.setdefault("LOG_LEVEL", "WARNING")

from datetime import datetime
from decimal import Decimal

import pytest
from fastapi.testclient import TestClient

from barbershop.lib.db import SessionLocal, drop_db, get_db_context, init_db
from barbershop.lib.metrics import reset_metrics
from barbershop.models import Appointment, AppointmentStatus, Professional, ProfessionalStatus, Service


@pytest.fixture(autouse=True)
def database():
    """Fresh schema and counters for every test."""
    init_db()
    reset_metrics()
    yield
    drop_db()


@pytest.fixture
def db_session():
    """Database session for service-layer tests."""
    session = SessionLocal()
    yield session
    session.rollback()
    session.close()


@pytest.fixture
def client():
    """Test client for the FastAPI app."""
    from barbershop.api.app import app

    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def make_service():
    """Insert a service and return its id."""
    def _make(name="Haircut", price="30.00", duration=30, description=None) -> int:
        with get_db_context() as db:
            service = Service(
                name=name,
                description=description or f"{name} service",
                price=Decimal(price),
                duration=duration,
            )
            db.add(service)
            db.flush()
            return service.id
    return _make


@pytest.fixture
def make_professional():
    """Insert a professional and return its id."""
    def _make(
        name="Joao",
        email=None,
        phone="555-0100",
        status=ProfessionalStatus.ACTIVE,
        service_ids=(),
    ) -> int:
        with get_db_context() as db:
            professional = Professional(
                name=name,
                email=email or f"{name.lower()}@barbershop.test",
                phone=phone,
                status=status,
            )
            if service_ids:
                professional.services = [db.get(Service, sid) for sid in service_ids]
            db.add(professional)
            db.flush()
            return professional.id
    return _make


@pytest.fixture
def make_appointment():
    """Insert an appointment directly, bypassing the availability check."""
    def _make(
        service_id: int,
        appointment_date: datetime,
        status=AppointmentStatus.SCHEDULED,
        total_value="30.00",
        professional_id=None,
        client_name="Ana",
    ) -> int:
        with get_db_context() as db:
            appointment = Appointment(
                client_name=client_name,
                client_phone="555",
                service_id=service_id,
                professional_id=professional_id,
                appointment_date=appointment_date,
                status=status,
                total_value=Decimal(total_value),
            )
            db.add(appointment)
            db.flush()
            return appointment.id
    return _make


@pytest.fixture
def haircut_id(make_service):
    """Id of a $30, 30 minute haircut."""
    return make_service()
