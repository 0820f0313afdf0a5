"""
API middleware module.
"""
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

__all__ = [
    "AppException",
    "NotFoundException",
    "ValidationException",
    "ConflictException",
    "StoreException",
    "app_exception_handler",
    "validation_exception_handler",
    "http_exception_handler",
    "unhandled_exception_handler",
]
