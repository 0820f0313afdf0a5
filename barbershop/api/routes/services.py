"""
Services API routes.
"""
from decimal import Decimal
from typing import Dict, List, Optional

from fastapi import APIRouter, Depends, status
from pydantic import BaseModel, Field

from barbershop.api.dependencies import get_service_catalog
from barbershop.lib.logging import get_logger
from barbershop.services.catalog_service import ServiceCatalog


logger = get_logger(__name__)


# Pydantic schemas
class ServicePayload(BaseModel):
    """
    Service fields as sent by the client.

    Everything is optional at the parsing level; the catalog decides which
    fields are required for create and treats the sent ones as the update.
    """
    name: Optional[str] = None
    description: Optional[str] = None
    price: Optional[Decimal] = Field(default=None, ge=0, description="Price, non-negative")
    duration: Optional[int] = Field(default=None, gt=0, description="Duration in minutes")


class ServiceResponse(BaseModel):
    """Service response schema."""
    id: int
    name: str
    description: str
    price: float
    duration: int

    model_config = {"from_attributes": True}


class MessageResponse(BaseModel):
    message: str


# Router
router = APIRouter(prefix="/services", tags=["services"])


@router.get("", response_model=List[ServiceResponse])
def list_services(catalog: ServiceCatalog = Depends(get_service_catalog)) -> List[ServiceResponse]:
    """List every service on the price list."""
    return [ServiceResponse.model_validate(s) for s in catalog.list_services()]


@router.get("/{service_id}", response_model=ServiceResponse)
def get_service(
    service_id: int,
    catalog: ServiceCatalog = Depends(get_service_catalog),
) -> ServiceResponse:
    return ServiceResponse.model_validate(catalog.get_service(service_id))


@router.post("", response_model=ServiceResponse, status_code=status.HTTP_201_CREATED)
def create_service(
    payload: ServicePayload,
    catalog: ServiceCatalog = Depends(get_service_catalog),
) -> ServiceResponse:
    """
    Create a service.

    name, description, price and duration are all required.
    """
    logger.info("POST /services")
    service = catalog.create_service(payload.model_dump())
    return ServiceResponse.model_validate(service)


@router.put("/{service_id}", response_model=ServiceResponse)
def update_service(
    service_id: int,
    payload: ServicePayload,
    catalog: ServiceCatalog = Depends(get_service_catalog),
) -> ServiceResponse:
    """Update only the fields present in the body."""
    service = catalog.update_service(service_id, payload.model_dump(exclude_unset=True))
    return ServiceResponse.model_validate(service)


@router.delete("/{service_id}", response_model=MessageResponse)
def delete_service(
    service_id: int,
    catalog: ServiceCatalog = Depends(get_service_catalog),
) -> Dict[str, str]:
    """Delete a service that no appointment references."""
    return catalog.delete_service(service_id)
