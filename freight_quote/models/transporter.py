"""Transporter/Carrier models for freight quotation."""
import uuid
from datetime import datetime, timezone
from typing import TYPE_CHECKING, Optional, List

from sqlalchemy import String, Boolean, DateTime, ForeignKey, Integer, Text, Float
from sqlalchemy import UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from freight_quote.database import Base
from freight_quote.db_types import JSONType, UUIDType

if TYPE_CHECKING:
    from freight_quote.models.tied_up import TiedUpTransporter


class Transporter(Base):
    """
    Transporter/Carrier listed on the marketplace.
    Public quotes are priced from its zone rate card.
    """
    __tablename__ = "transporters"

    id: Mapped[uuid.UUID] = mapped_column(
        UUIDType,
        primary_key=True,
        default=uuid.uuid4
    )

    # Identification
    company_name: Mapped[str] = mapped_column(
        String(200),
        unique=True,
        nullable=False,
        index=True
    )
    vendor_code: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)

    # Contact
    contact_phone: Mapped[Optional[str]] = mapped_column(String(20), nullable=True)
    contact_email: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    gst_no: Mapped[Optional[str]] = mapped_column(
        String(15),
        nullable=True,
        comment="Transporter GSTIN"
    )

    # Address
    address: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    state: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    pincode: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)

    is_active: Mapped[bool] = mapped_column(Boolean, default=True)

    # Timestamps
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
        nullable=False
    )

    # Relationships
    serviceability: Mapped[List["TransporterServiceability"]] = relationship(
        "TransporterServiceability",
        back_populates="transporter",
        cascade="all, delete-orphan"
    )
    price: Mapped[Optional["TransporterPrice"]] = relationship(
        "TransporterPrice",
        back_populates="transporter",
        cascade="all, delete-orphan",
        uselist=False
    )
    tied_ups: Mapped[List["TiedUpTransporter"]] = relationship(
        "TiedUpTransporter",
        back_populates="transporter",
        cascade="all, delete-orphan"
    )

    def __repr__(self) -> str:
        return f"<Transporter(company_name='{self.company_name}')>"


class TransporterServiceability(Base):
    """
    Transporter service table entry.
    One row per pincode the transporter serves, with its zone and ODA flag.
    """
    __tablename__ = "transporter_serviceability"
    __table_args__ = (
        UniqueConstraint(
            "transporter_id", "pincode",
            name="uq_transporter_serviceability_pincode"
        ),
    )

    id: Mapped[uuid.UUID] = mapped_column(
        UUIDType,
        primary_key=True,
        default=uuid.uuid4
    )

    transporter_id: Mapped[uuid.UUID] = mapped_column(
        UUIDType,
        ForeignKey("transporters.id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )

    pincode: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        index=True
    )

    # Zone
    zone: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        comment="Carrier-defined zone used to index the rate card"
    )

    # Out of delivery area: surcharge at destination, unusable as pickup
    is_oda: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)

    # Relationships
    transporter: Mapped["Transporter"] = relationship(
        "Transporter",
        back_populates="serviceability"
    )

    def __repr__(self) -> str:
        return f"<TransporterServiceability({self.pincode} zone={self.zone} oda={self.is_oda})>"


class TransporterPrice(Base):
    """
    Public rate card of a transporter.

    zone_rates: {"<origin zone>": {"<destination zone>": price_per_kg}}
    price_rate: charge configuration, camelCase keys as uploaded by carriers
    """
    __tablename__ = "transporter_prices"

    id: Mapped[uuid.UUID] = mapped_column(
        UUIDType,
        primary_key=True,
        default=uuid.uuid4
    )

    transporter_id: Mapped[uuid.UUID] = mapped_column(
        UUIDType,
        ForeignKey("transporters.id", ondelete="CASCADE"),
        nullable=False,
        unique=True,
        index=True
    )

    zone_rates: Mapped[dict] = mapped_column(JSONType, default=dict, nullable=False)
    price_rate: Mapped[dict] = mapped_column(JSONType, default=dict, nullable=False)

    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
        nullable=False
    )

    transporter: Mapped["Transporter"] = relationship(
        "Transporter",
        back_populates="price"
    )

    def __repr__(self) -> str:
        return f"<TransporterPrice(transporter_id='{self.transporter_id}')>"


class TransporterRating(Base):
    """Running average of customer ratings for a transporter."""
    __tablename__ = "transporter_ratings"

    transporter_id: Mapped[uuid.UUID] = mapped_column(
        UUIDType,
        ForeignKey("transporters.id", ondelete="CASCADE"),
        primary_key=True
    )
    rating_sum: Mapped[float] = mapped_column(Float, default=0.0, nullable=False)
    review_count: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    rating: Mapped[float] = mapped_column(Float, default=0.0, nullable=False)

    def add_review(self, rating: float) -> None:
        self.rating_sum = (self.rating_sum or 0.0) + rating
        self.review_count = (self.review_count or 0) + 1
        self.rating = self.rating_sum / self.review_count
