"""Customer-negotiated (tied-up) transporter price lists."""
import uuid
from datetime import datetime, timezone
from typing import TYPE_CHECKING, Optional

from sqlalchemy import String, DateTime, ForeignKey, Integer, Text
from sqlalchemy import UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from freight_quote.database import Base
from freight_quote.db_types import JSONType, UUIDType

if TYPE_CHECKING:
    from freight_quote.models.customer import Customer
    from freight_quote.models.transporter import Transporter


class VendorDetailsMixin:
    """Vendor details captured when a customer registers a tie-up."""
    vendor_code: Mapped[str] = mapped_column(String(50), nullable=False)
    vendor_phone: Mapped[str] = mapped_column(String(20), nullable=False)
    vendor_email: Mapped[str] = mapped_column(String(255), nullable=False)
    gst_no: Mapped[str] = mapped_column(String(15), nullable=False)
    mode: Mapped[str] = mapped_column(String(20), nullable=False)
    address: Mapped[str] = mapped_column(Text, nullable=False)
    state: Mapped[str] = mapped_column(String(100), nullable=False)
    pincode: Mapped[int] = mapped_column(Integer, nullable=False)

    # price_chart: {"<origin pincode>": {"<destination zone>": price_per_kg}}
    price_rate: Mapped[dict] = mapped_column(JSONType, default=dict, nullable=False)
    price_chart: Mapped[dict] = mapped_column(JSONType, default=dict, nullable=False)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        nullable=False
    )


class TiedUpTransporter(VendorDetailsMixin, Base):
    """
    Customer to transporter relationship with a negotiated price chart.
    Always fully visible to the owning customer.
    """
    __tablename__ = "tied_up_transporters"
    __table_args__ = (
        UniqueConstraint(
            "customer_id", "transporter_id",
            name="uq_tied_up_customer_transporter"
        ),
    )

    id: Mapped[uuid.UUID] = mapped_column(
        UUIDType,
        primary_key=True,
        default=uuid.uuid4
    )
    customer_id: Mapped[uuid.UUID] = mapped_column(
        UUIDType,
        ForeignKey("customers.id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )
    transporter_id: Mapped[uuid.UUID] = mapped_column(
        UUIDType,
        ForeignKey("transporters.id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )

    customer: Mapped["Customer"] = relationship("Customer", back_populates="tied_ups")
    transporter: Mapped["Transporter"] = relationship("Transporter", back_populates="tied_ups")

    def __repr__(self) -> str:
        return f"<TiedUpTransporter(customer={self.customer_id}, transporter={self.transporter_id})>"


class TemporaryTransporter(VendorDetailsMixin, Base):
    """
    Tie-up request naming a company that is not on the marketplace yet.
    Held for verification, never quoted.
    """
    __tablename__ = "temporary_transporters"

    id: Mapped[uuid.UUID] = mapped_column(
        UUIDType,
        primary_key=True,
        default=uuid.uuid4
    )
    customer_id: Mapped[uuid.UUID] = mapped_column(
        UUIDType,
        ForeignKey("customers.id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )
    company_name: Mapped[str] = mapped_column(String(200), nullable=False)
    verified_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True),
        nullable=True
    )

    def __repr__(self) -> str:
        return f"<TemporaryTransporter(company_name='{self.company_name}')>"
