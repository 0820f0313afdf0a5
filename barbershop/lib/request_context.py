"""
Request context utilities for accessing the correlation ID of a request.
"""
from typing import Optional

from fastapi import Request

from barbershop.lib import logging as app_logging


def get_correlation_id(request: Request) -> str:
    """
    Get the correlation ID for a request.

    Prefers the value stored on ``request.state`` by the correlation
    middleware, then the logging context, then ``"unknown"``.
    """
    correlation_id: Optional[str] = getattr(request.state, "correlation_id", None)
    return correlation_id or app_logging.get_correlation_id() or "unknown"
