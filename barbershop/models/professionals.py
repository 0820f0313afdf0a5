"""
Professional model - barbers and the services each one performs.
"""
from typing import List
import enum

from sqlalchemy import Column, ForeignKey, Integer, String, Table, Enum as SQLEnum
from sqlalchemy.orm import Mapped, mapped_column, relationship

from barbershop.lib.db import Base
from barbershop.models.services import Service


class ProfessionalStatus(str, enum.Enum):
    """Professional status. Deleting a professional only flips it to inactive."""
    ACTIVE = "active"
    INACTIVE = "inactive"


# Which services a professional may perform
professional_services = Table(
    "professional_services",
    Base.metadata,
    Column(
        "professional_id",
        Integer,
        ForeignKey("professionals.id", ondelete="CASCADE"),
        primary_key=True,
    ),
    Column(
        "service_id",
        Integer,
        ForeignKey("services.id", ondelete="CASCADE"),
        primary_key=True,
    ),
)


# Postgres default name for the email UNIQUE constraint, and SQLite's column form
EMAIL_CONSTRAINTS = ("professionals_email_key", "professionals.email")


class Professional(Base):
    """
    Professional entity - staff that can be assigned to appointments.
    Rows are never purged so past appointments keep their professional.
    """
    __tablename__ = "professionals"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    name: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    email: Mapped[str] = mapped_column(
        String(255),
        unique=True,
        nullable=False,
        comment="Unique across active and inactive professionals",
    )
    phone: Mapped[str] = mapped_column(String(20), nullable=False)

    status: Mapped[ProfessionalStatus] = mapped_column(
        SQLEnum(
            ProfessionalStatus,
            name="professional_status",
            values_callable=lambda e: [member.value for member in e],
        ),
        nullable=False,
        default=ProfessionalStatus.ACTIVE,
        index=True,
    )

    services: Mapped[List[Service]] = relationship(
        secondary=professional_services,
        back_populates="professionals",
        order_by=Service.id,
        lazy="selectin",
    )

    @property
    def is_active(self) -> bool:
        return self.status == ProfessionalStatus.ACTIVE

    @property
    def service_ids(self) -> List[int]:
        return [service.id for service in self.services]

    def __repr__(self) -> str:
        return f"<Professional(id={self.id}, name={self.name}, status={self.status})>"
