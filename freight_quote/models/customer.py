import uuid
from datetime import datetime, timezone
from typing import TYPE_CHECKING, Optional, List

from sqlalchemy import String, Boolean, DateTime
from sqlalchemy.orm import Mapped, mapped_column, relationship

from freight_quote.database import Base
from freight_quote.db_types import UUIDType

if TYPE_CHECKING:
    from freight_quote.models.tied_up import TiedUpTransporter


class Customer(Base):
    """
    Shipper requesting quotes.
    Subscription decides how much public-carrier detail is disclosed.
    """
    __tablename__ = "customers"

    id: Mapped[uuid.UUID] = mapped_column(
        UUIDType,
        primary_key=True,
        default=uuid.uuid4
    )
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    email: Mapped[Optional[str]] = mapped_column(String(255), nullable=True, index=True)
    is_subscribed: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        nullable=False
    )

    tied_ups: Mapped[List["TiedUpTransporter"]] = relationship(
        "TiedUpTransporter",
        back_populates="customer",
        cascade="all, delete-orphan"
    )

    def __repr__(self) -> str:
        return f"<Customer(name='{self.name}', subscribed={self.is_subscribed})>"
