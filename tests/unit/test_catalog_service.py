"""
Unit tests for ServiceCatalog and ProfessionalDirectory.
"""
from datetime import datetime
from decimal import Decimal

import pytest

from barbershop.api.middleware.error_handler import (
    ConflictException,
    NotFoundException,
    ValidationException,
)
from barbershop.models import ProfessionalStatus
from barbershop.services.catalog_service import EMAIL_IN_USE, ProfessionalDirectory, ServiceCatalog


@pytest.fixture
def catalog(db_session):
    return ServiceCatalog(db_session)


@pytest.fixture
def directory(db_session):
    return ProfessionalDirectory(db_session)


# ===== Services =====

@pytest.mark.unit
def test_create_and_list_services(catalog):
    """Test created services are listed in creation order."""
    catalog.create_service({"name": "Haircut", "description": "Classic cut", "price": 30, "duration": 30})
    catalog.create_service({"name": "Shave", "description": "Hot towel", "price": Decimal("20.00"), "duration": 20})

    services = catalog.list_services()

    assert [s.name for s in services] == ["Haircut", "Shave"]
    assert services[0].price == Decimal("30.00")


@pytest.mark.unit
def test_create_service_requires_every_field(catalog):
    """Test name, description, price and duration are all required."""
    with pytest.raises(ValidationException) as exc_info:
        catalog.create_service({"name": "Haircut", "price": 30})

    assert exc_info.value.details["errors"]["missing"] == ["description", "duration"]


@pytest.mark.unit
def test_create_service_accepts_zero_price(catalog):
    """Test a free service is valid."""
    service = catalog.create_service(
        {"name": "Consultation", "description": "Style advice", "price": 0, "duration": 15}
    )

    assert service.price == Decimal("0")


@pytest.mark.unit
@pytest.mark.parametrize("field,value", [("price", -1), ("duration", 0)])
def test_create_service_rejects_bad_values(catalog, field, value):
    """Test negative prices and non-positive durations are refused."""
    data = {"name": "Haircut", "description": "Cut", "price": 30, "duration": 30, field: value}

    with pytest.raises(ValidationException) as exc_info:
        catalog.create_service(data)

    assert field in exc_info.value.details["errors"]


@pytest.mark.unit
def test_get_missing_service(catalog):
    """Test unknown ids raise NotFoundException."""
    with pytest.raises(NotFoundException):
        catalog.get_service(99)


@pytest.mark.unit
def test_update_service_partial(catalog, haircut_id):
    """Test only the sent fields change."""
    service = catalog.update_service(haircut_id, {"price": Decimal("35.00")})

    assert service.price == Decimal("35.00")
    assert service.name == "Haircut"
    assert service.duration == 30


@pytest.mark.unit
def test_update_service_rejects_empty_and_blank(catalog, haircut_id):
    """Test empty updates and blank names are refused."""
    with pytest.raises(ValidationException):
        catalog.update_service(haircut_id, {})
    with pytest.raises(ValidationException):
        catalog.update_service(haircut_id, {"name": " "})


@pytest.mark.unit
def test_delete_unused_service(catalog, haircut_id):
    """Test a service without appointments can be deleted."""
    assert catalog.delete_service(haircut_id) == {"message": "Service deleted successfully"}

    with pytest.raises(NotFoundException):
        catalog.get_service(haircut_id)


@pytest.mark.unit
def test_delete_service_in_use_is_refused(catalog, haircut_id, make_appointment):
    """Test a referenced service stays and the caller learns why."""
    make_appointment(haircut_id, datetime(2024, 6, 1, 10))

    with pytest.raises(ConflictException) as exc_info:
        catalog.delete_service(haircut_id)

    assert exc_info.value.details == {"service_id": haircut_id, "appointments": 1}
    assert catalog.get_service(haircut_id).name == "Haircut"


# ===== Professionals =====

@pytest.mark.unit
def test_create_professional_with_services(directory, haircut_id, make_service):
    """Test services are attached in request order with duplicates dropped."""
    shave_id = make_service(name="Shave", price="20.00", duration=20)

    professional = directory.create_professional({
        "name": "Joao",
        "email": "joao@barbershop.test",
        "phone": "555-0100",
        "services": [shave_id, haircut_id, shave_id],
    })

    assert professional.status == ProfessionalStatus.ACTIVE
    assert professional.is_active is True
    assert sorted(professional.service_ids) == sorted([haircut_id, shave_id])


@pytest.mark.unit
def test_create_professional_requires_fields(directory):
    """Test name, email and phone are required."""
    with pytest.raises(ValidationException) as exc_info:
        directory.create_professional({"name": "Joao"})

    assert exc_info.value.details["errors"]["missing"] == ["email", "phone"]


@pytest.mark.unit
def test_create_professional_duplicate_email(directory, make_professional):
    """Test email addresses are unique across professionals."""
    make_professional(name="Joao", email="shared@barbershop.test")

    with pytest.raises(ConflictException) as exc_info:
        directory.create_professional(
            {"name": "Pedro", "email": "shared@barbershop.test", "phone": "555"}
        )

    assert exc_info.value.message == EMAIL_IN_USE


@pytest.mark.unit
def test_create_professional_unknown_service(directory):
    """Test linking a missing service raises NotFoundException."""
    with pytest.raises(NotFoundException):
        directory.create_professional(
            {"name": "Joao", "email": "joao@barbershop.test", "phone": "555", "services": [77]}
        )


@pytest.mark.unit
def test_list_active_only(directory, make_professional):
    """Test the active listing hides inactive professionals; the full listing is by name."""
    make_professional(name="Pedro")
    make_professional(name="Carlos", status=ProfessionalStatus.INACTIVE)
    make_professional(name="Andre")

    assert [p.name for p in directory.list_professionals()] == ["Andre", "Carlos", "Pedro"]
    assert [p.name for p in directory.list_professionals(active_only=True)] == ["Andre", "Pedro"]


@pytest.mark.unit
def test_get_active_professional_rejects_inactive(directory, make_professional):
    """Test inactive professionals are readable but not bookable."""
    carlos = make_professional(name="Carlos", status=ProfessionalStatus.INACTIVE)

    assert directory.get_professional(carlos).name == "Carlos"
    with pytest.raises(NotFoundException):
        directory.get_active_professional(carlos)


@pytest.mark.unit
def test_update_professional_replaces_services(directory, haircut_id, make_service, make_professional):
    """Test a services list replaces the whole association set."""
    shave_id = make_service(name="Shave", price="20.00", duration=20)
    joao = make_professional(name="Joao", service_ids=(haircut_id,))

    professional = directory.update_professional(joao, {"services": [shave_id]})

    assert professional.service_ids == [shave_id]


@pytest.mark.unit
def test_update_professional_null_services_clears(directory, haircut_id, make_professional):
    """Test services: null removes every association."""
    joao = make_professional(name="Joao", service_ids=(haircut_id,))

    professional = directory.update_professional(joao, {"services": None})

    assert professional.service_ids == []


@pytest.mark.unit
def test_update_professional_without_services_keeps_them(directory, haircut_id, make_professional):
    """Test omitting services leaves the associations alone."""
    joao = make_professional(name="Joao", service_ids=(haircut_id,))

    professional = directory.update_professional(joao, {"phone": "555-7777"})

    assert professional.phone == "555-7777"
    assert professional.service_ids == [haircut_id]


@pytest.mark.unit
def test_update_professional_is_atomic(directory, haircut_id, make_professional, db_session):
    """Test a bad service id leaves the professional untouched."""
    joao = make_professional(name="Joao", service_ids=(haircut_id,))

    with pytest.raises(NotFoundException):
        directory.update_professional(joao, {"name": "Joao Silva", "services": [haircut_id, 404]})

    db_session.expire_all()
    professional = directory.get_professional(joao)
    assert professional.name == "Joao"
    assert professional.service_ids == [haircut_id]


@pytest.mark.unit
def test_update_professional_email_taken_by_another(directory, make_professional):
    """Test changing to another professional's email is refused."""
    make_professional(name="Joao", email="joao@barbershop.test")
    pedro = make_professional(name="Pedro", email="pedro@barbershop.test")

    with pytest.raises(ConflictException):
        directory.update_professional(pedro, {"email": "joao@barbershop.test"})


@pytest.mark.unit
def test_update_professional_keeps_own_email(directory, make_professional):
    """Test re-sending the current email is not a conflict."""
    joao = make_professional(name="Joao", email="joao@barbershop.test")

    professional = directory.update_professional(
        joao, {"email": "joao@barbershop.test", "status": "inactive"}
    )

    assert professional.status == ProfessionalStatus.INACTIVE


@pytest.mark.unit
def test_deactivate_professional(directory, make_professional):
    """Test soft delete keeps the row and flips the status."""
    joao = make_professional(name="Joao")

    result = directory.deactivate_professional(joao)

    assert result == {"message": "Professional deactivated successfully"}
    assert directory.get_professional(joao).status == ProfessionalStatus.INACTIVE
    assert directory.list_professionals(active_only=True) == []


@pytest.mark.unit
def test_deactivate_missing_professional(directory):
    """Test deactivating an unknown id raises NotFoundException."""
    with pytest.raises(NotFoundException):
        directory.deactivate_professional(3)
