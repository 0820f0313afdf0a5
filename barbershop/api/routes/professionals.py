"""
Professionals API routes.

Provides:
- GET /professionals: all professionals, active and inactive
- GET /professionals/active: professionals that can take bookings
- GET /professionals/{id}: one professional, including inactive ones
- POST /professionals, PUT /professionals/{id}
- DELETE /professionals/{id}: soft delete (status -> inactive)
"""
from typing import Dict, List, Optional

from fastapi import APIRouter, Depends, status
from pydantic import BaseModel, Field

from barbershop.api.dependencies import get_professional_directory
from barbershop.lib.logging import get_logger
from barbershop.models.professionals import Professional, ProfessionalStatus
from barbershop.services.catalog_service import ProfessionalDirectory


logger = get_logger(__name__)
router = APIRouter(prefix="/professionals", tags=["professionals"])

EMAIL_PATTERN = r"^[\w\.\+-]+@[\w\.-]+\.\w+$"


# Request/response models
class ProfessionalPayload(BaseModel):
    """Professional fields as sent by the client."""
    name: Optional[str] = None
    email: Optional[str] = Field(default=None, pattern=EMAIL_PATTERN)
    phone: Optional[str] = None
    status: Optional[ProfessionalStatus] = None
    services: Optional[List[int]] = Field(
        default=None,
        description="Ids of the services this professional performs; replaces the current set",
    )


class ProfessionalResponse(BaseModel):
    id: int
    name: str
    email: str
    phone: str
    status: ProfessionalStatus
    available: bool = Field(description="True while the professional is active")
    services: List[int]

    @classmethod
    def from_model(cls, professional: Professional) -> "ProfessionalResponse":
        return cls(
            id=professional.id,
            name=professional.name,
            email=professional.email,
            phone=professional.phone,
            status=professional.status,
            available=professional.is_active,
            services=professional.service_ids,
        )


class MessageResponse(BaseModel):
    message: str


@router.get("", response_model=List[ProfessionalResponse])
def list_professionals(
    directory: ProfessionalDirectory = Depends(get_professional_directory),
) -> List[ProfessionalResponse]:
    return [ProfessionalResponse.from_model(p) for p in directory.list_professionals()]


@router.get("/active", response_model=List[ProfessionalResponse])
def list_active_professionals(
    directory: ProfessionalDirectory = Depends(get_professional_directory),
) -> List[ProfessionalResponse]:
    return [
        ProfessionalResponse.from_model(p)
        for p in directory.list_professionals(active_only=True)
    ]


@router.get("/{professional_id}", response_model=ProfessionalResponse)
def get_professional(
    professional_id: int,
    directory: ProfessionalDirectory = Depends(get_professional_directory),
) -> ProfessionalResponse:
    return ProfessionalResponse.from_model(directory.get_professional(professional_id))


@router.post("", response_model=ProfessionalResponse, status_code=status.HTTP_201_CREATED)
def create_professional(
    payload: ProfessionalPayload,
    directory: ProfessionalDirectory = Depends(get_professional_directory),
) -> ProfessionalResponse:
    """
    Create a professional.

    name, email and phone are required; status defaults to active.
    """
    logger.info("POST /professionals")
    professional = directory.create_professional(payload.model_dump())
    return ProfessionalResponse.from_model(professional)


@router.put("/{professional_id}", response_model=ProfessionalResponse)
def update_professional(
    professional_id: int,
    payload: ProfessionalPayload,
    directory: ProfessionalDirectory = Depends(get_professional_directory),
) -> ProfessionalResponse:
    professional = directory.update_professional(
        professional_id,
        payload.model_dump(exclude_unset=True),
    )
    return ProfessionalResponse.from_model(professional)


@router.delete("/{professional_id}", response_model=MessageResponse)
def delete_professional(
    professional_id: int,
    directory: ProfessionalDirectory = Depends(get_professional_directory),
) -> Dict[str, str]:
    return directory.deactivate_professional(professional_id)
