"""
Tests for error handler middleware and custom exceptions.
"""
import pytest
from fastapi import FastAPI, Request
from fastapi.testclient import TestClient
from pydantic import BaseModel, Field

from barbershop.api.middleware.error_handler import (
    AppException,
    NotFoundException,
    ValidationException,
    ConflictException,
    StoreException,
    app_exception_handler,
    validation_exception_handler,
    http_exception_handler,
    unhandled_exception_handler,
)


@pytest.mark.unit
def test_app_exception_creation():
    """Test creating custom AppException."""
    exc = AppException(
        message="Test error",
        status_code=500,
        details={"key": "value"},
    )

    assert exc.message == "Test error"
    assert exc.status_code == 500
    assert exc.details == {"key": "value"}


@pytest.mark.unit
def test_not_found_exception():
    """Test NotFoundException creation."""
    exc = NotFoundException("Service", 12)

    assert exc.message == "Service with id '12' not found"
    assert exc.status_code == 404
    assert exc.details["resource"] == "Service"
    assert exc.details["resource_id"] == 12


@pytest.mark.unit
def test_not_found_exception_without_id():
    """Test NotFoundException without resource ID."""
    exc = NotFoundException("Appointment")

    assert exc.message == "Appointment not found"
    assert exc.status_code == 404


@pytest.mark.unit
def test_validation_exception_is_bad_request():
    """Test ValidationException maps to 400 and carries field errors."""
    exc = ValidationException(
        "Please provide all required fields",
        errors={"missing": ["client_name"]},
    )

    assert exc.status_code == 400
    assert exc.details == {"errors": {"missing": ["client_name"]}}


@pytest.mark.unit
def test_validation_exception_without_errors_has_no_details():
    """Test ValidationException with no field errors keeps details empty."""
    assert ValidationException("Year and month are required").details == {}


@pytest.mark.unit
def test_conflict_exception_is_bad_request():
    """Test ConflictException maps to 400, not 409."""
    exc = ConflictException("This time slot is not available")

    assert exc.message == "This time slot is not available"
    assert exc.status_code == 400


@pytest.mark.unit
def test_store_exception_is_generic():
    """Test StoreException maps to 500 with a generic message."""
    exc = StoreException()

    assert exc.status_code == 500
    assert exc.message == "Unexpected storage error"


@pytest.mark.integration
def test_app_exception_handler_in_route():
    """Test custom exception handler in actual route."""
    app = FastAPI()
    app.add_exception_handler(AppException, app_exception_handler)

    @app.get("/test-error")
    async def test_error():
        raise NotFoundException("Appointment", 123)

    client = TestClient(app)
    response = client.get("/test-error")

    assert response.status_code == 404
    data = response.json()
    assert data["message"] == "Appointment with id '123' not found"
    assert "correlation_id" in data


@pytest.mark.integration
def test_validation_error_handler():
    """Test request validation errors become 400 responses."""
    app = FastAPI()
    from fastapi.exceptions import RequestValidationError
    app.add_exception_handler(RequestValidationError, validation_exception_handler)

    class TestModel(BaseModel):
        price: float = Field(..., ge=0)
        duration: int = Field(..., gt=0)

    @app.post("/test-validation")
    async def test_validation(data: TestModel):
        return {"ok": True}

    client = TestClient(app)
    response = client.post("/test-validation", json={"price": -1, "duration": 0})

    assert response.status_code == 400
    data = response.json()
    assert data["message"] == "Validation error"
    assert len(data["details"]["errors"]) == 2


@pytest.mark.integration
def test_http_exception_handler():
    """Test HTTP exception handler."""
    app = FastAPI()

    from starlette.exceptions import HTTPException as StarletteHTTPException
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)

    @app.get("/test-http-error")
    async def test_http_error():
        raise StarletteHTTPException(status_code=404, detail="Page not found")

    client = TestClient(app)
    response = client.get("/test-http-error")

    assert response.status_code == 404
    data = response.json()
    assert data["message"] == "Page not found"
    assert "correlation_id" in data


@pytest.mark.integration
def test_unhandled_exception_handler():
    """Test handler for unhandled exceptions hides the error text."""
    app = FastAPI()
    app.add_exception_handler(Exception, unhandled_exception_handler)

    @app.get("/test-unhandled")
    async def test_unhandled():
        raise ValueError("connection string with password")

    client = TestClient(app, raise_server_exceptions=False)
    response = client.get("/test-unhandled")

    assert response.status_code == 500
    data = response.json()
    assert data["message"] == "Internal server error"
    assert "password" not in response.text


@pytest.mark.integration
def test_exception_with_correlation_id():
    """Test that correlation ID is included in error response."""
    app = FastAPI()
    app.add_exception_handler(AppException, app_exception_handler)

    @app.get("/test-correlation")
    async def test_correlation(request: Request):
        request.state.correlation_id = "test-correlation-123"
        raise ConflictException("Email already in use by another professional")

    client = TestClient(app)
    response = client.get("/test-correlation")

    assert response.status_code == 400
    assert response.json()["correlation_id"] == "test-correlation-123"


@pytest.mark.integration
def test_exception_details_included():
    """Test that exception details are included in response."""
    app = FastAPI()
    app.add_exception_handler(AppException, app_exception_handler)

    @app.get("/test-details")
    async def test_details():
        raise ConflictException(
            "Service is referenced by existing appointments",
            details={"service_id": 1, "appointments": 3},
        )

    client = TestClient(app)
    response = client.get("/test-details")

    assert response.status_code == 400
    data = response.json()
    assert data["details"] == {"service_id": 1, "appointments": 3}


@pytest.mark.integration
def test_store_exception_response_is_generic():
    """Test storage failures surface as 500 without internals."""
    app = FastAPI()
    app.add_exception_handler(AppException, app_exception_handler)

    @app.get("/test-store")
    async def test_store():
        raise StoreException()

    client = TestClient(app)
    response = client.get("/test-store")

    assert response.status_code == 500
    assert response.json()["message"] == "Unexpected storage error"
    assert "details" not in response.json()
