"""Artisan profile model."""
import enum
import uuid
from datetime import datetime
from typing import TYPE_CHECKING, List, Optional

from sqlalchemy import JSON, Boolean, DateTime, Enum, Float, ForeignKey, Integer, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .base import Base

if TYPE_CHECKING:
    from .user import User


class ArtisanStatus(str, enum.Enum):
    PENDING_VERIFICATION = "PENDING_VERIFICATION"
    VERIFIED = "VERIFIED"
    REJECTED = "REJECTED"


class Artisan(Base):
    """Business profile owned by a user with the ARTISAN role."""

    __tablename__ = "artisans"

    user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("users.id", ondelete="CASCADE"),
        unique=True,
        nullable=False
    )

    # Business identity
    business_name: Mapped[str] = mapped_column(String(255), nullable=False)
    business_license: Mapped[str] = mapped_column(String(100), unique=True, nullable=False)
    tax_id: Mapped[Optional[str]] = mapped_column(String(100), unique=True)
    service_categories: Mapped[List[str]] = mapped_column(JSON, default=list, nullable=False)
    service_areas: Mapped[List[str]] = mapped_column(JSON, default=list, nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text)

    # Verification
    status: Mapped[ArtisanStatus] = mapped_column(
        Enum(ArtisanStatus, native_enum=False, length=30),
        default=ArtisanStatus.PENDING_VERIFICATION,
        nullable=False
    )
    verification_date: Mapped[Optional[datetime]] = mapped_column(DateTime)

    # Reputation
    rating: Mapped[Optional[float]] = mapped_column(Float)
    total_ratings: Mapped[int] = mapped_column(Integer, default=0, nullable=False)

    # Availability and pricing
    is_available: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    working_hours: Mapped[Optional[str]] = mapped_column(String(255))
    max_job_distance: Mapped[int] = mapped_column(Integer, default=50, nullable=False)
    hourly_rate: Mapped[Optional[float]] = mapped_column(Float)
    years_of_experience: Mapped[Optional[int]] = mapped_column(Integer)
    qualifications: Mapped[List[str]] = mapped_column(JSON, default=list, nullable=False)
    insurance_info: Mapped[Optional[str]] = mapped_column(Text)

    user: Mapped["User"] = relationship(back_populates="artisan")

    def __repr__(self) -> str:
        return f"<Artisan(business_name={self.business_name}, status={self.status})>"
