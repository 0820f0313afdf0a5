"""
Service model - offerings on the price list (haircut, beard trim, ...).
"""
from decimal import Decimal
from typing import List, TYPE_CHECKING

from sqlalchemy import String, Numeric, Integer, CheckConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from barbershop.lib.db import Base

if TYPE_CHECKING:
    from barbershop.models.professionals import Professional


class Service(Base):
    """
    Service entity - bookable offerings.
    Appointments copy the price at booking time, so changing it here never
    rewrites historical totals.
    """
    __tablename__ = "services"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    name: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    description: Mapped[str] = mapped_column(String(1000), nullable=False)

    # Pricing and duration
    price: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    duration: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        comment="Duration in minutes",
    )

    professionals: Mapped[List["Professional"]] = relationship(
        secondary="professional_services",
        back_populates="services",
    )

    __table_args__ = (
        CheckConstraint("price >= 0", name="service_price_non_negative"),
        CheckConstraint("duration > 0", name="service_duration_positive"),
    )

    def __repr__(self) -> str:
        return f"<Service(id={self.id}, name={self.name}, price={self.price})>"
