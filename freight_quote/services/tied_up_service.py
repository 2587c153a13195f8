"""
Tied-Up Transporter Service.

Handles:
1. Registering a customer's negotiated price list with a transporter
2. Holding tie-ups with unlisted companies for verification
3. Listing and removing tie-ups
4. Updating the transporter's running rating
"""
import logging
import uuid
from typing import Dict, List, Optional, Tuple, Union

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from freight_quote.models.customer import Customer
from freight_quote.models.tied_up import TemporaryTransporter, TiedUpTransporter
from freight_quote.models.transporter import Transporter, TransporterRating
from freight_quote.schemas.tied_up import TiedUpCompanyCreate

logger = logging.getLogger(__name__)


class TiedUpError(Exception):
    """Custom exception for tie-up errors."""
    def __init__(self, message: str, details: Dict = None):
        self.message = message
        self.details = details or {}
        super().__init__(self.message)


class TiedUpNotFoundError(TiedUpError):
    pass


class TiedUpService:
    """Service for customer tie-ups with transporters."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def add_tied_up_company(
        self,
        data: TiedUpCompanyCreate,
    ) -> Tuple[bool, Union[TiedUpTransporter, TemporaryTransporter]]:
        """
        Register a tie-up.

        Returns (created, record): created is False when the company is not
        listed and the request was stored as a TemporaryTransporter instead.
        """
        customer = await self.db.get(Customer, data.customer_id)
        if customer is None:
            raise TiedUpNotFoundError("Customer not found", {"customer_id": str(data.customer_id)})

        company_name = data.company_name.strip()
        result = await self.db.execute(
            select(Transporter)
            .where(func.lower(Transporter.company_name) == company_name.lower())
            .order_by(Transporter.company_name, Transporter.id)
        )
        candidates = result.scalars().all()
        # Names are unique only case-sensitively: an exact match wins
        transporter = next(
            (t for t in candidates if t.company_name == company_name),
            candidates[0] if candidates else None,
        )

        vendor_fields = dict(
            vendor_code=data.vendor_code,
            vendor_phone=data.vendor_phone,
            vendor_email=data.vendor_email,
            gst_no=data.gst_no,
            mode=data.mode,
            address=data.address,
            state=data.state,
            pincode=data.pincode,
            price_rate=data.price_rate.to_document(),
            price_chart=data.price_chart,
        )

        if transporter is None:
            temporary = TemporaryTransporter(
                customer_id=data.customer_id,
                company_name=data.company_name.strip(),
                **vendor_fields,
            )
            self.db.add(temporary)
            await self.db.flush()
            logger.info(
                f"Company '{data.company_name}' not listed, tie-up held for verification "
                f"(customer {data.customer_id})"
            )
            return False, temporary

        existing = await self._get_tied_up(data.customer_id, transporter.id)
        if existing is not None:
            raise ValueError(f"Customer is already tied up with {transporter.company_name}")

        tied_up = TiedUpTransporter(
            customer_id=data.customer_id,
            transporter_id=transporter.id,
            **vendor_fields,
        )
        self.db.add(tied_up)

        rating = await self.db.get(TransporterRating, transporter.id)
        if rating is None:
            rating = TransporterRating(transporter_id=transporter.id)
            self.db.add(rating)
        rating.add_review(data.rating)

        await self.db.flush()
        logger.info(
            f"Tie-up added: customer {data.customer_id} -> {transporter.company_name}, "
            f"rating now {rating.rating:.2f} over {rating.review_count} review(s)"
        )
        return True, tied_up

    async def list_tied_up_companies(self, customer_id: uuid.UUID) -> List[TiedUpTransporter]:
        result = await self.db.execute(
            select(TiedUpTransporter)
            .where(TiedUpTransporter.customer_id == customer_id)
            .order_by(TiedUpTransporter.created_at)
        )
        return list(result.scalars().all())

    async def remove_tied_up_company(self, customer_id: uuid.UUID, transporter_id: uuid.UUID) -> None:
        tied_up = await self._get_tied_up(customer_id, transporter_id)
        if tied_up is None:
            raise TiedUpNotFoundError(
                "Tied up company not found",
                {"customer_id": str(customer_id), "transporter_id": str(transporter_id)},
            )
        await self.db.delete(tied_up)
        await self.db.flush()
        logger.info(f"Tie-up removed: customer {customer_id} -> transporter {transporter_id}")

    async def list_temporary_transporters(self, customer_id: uuid.UUID) -> List[TemporaryTransporter]:
        """Tie-ups awaiting verification for a customer."""
        result = await self.db.execute(
            select(TemporaryTransporter)
            .where(
                TemporaryTransporter.customer_id == customer_id,
                TemporaryTransporter.verified_at.is_(None),
            )
            .order_by(TemporaryTransporter.created_at)
        )
        return list(result.scalars().all())

    async def _get_tied_up(
        self,
        customer_id: uuid.UUID,
        transporter_id: uuid.UUID,
    ) -> Optional[TiedUpTransporter]:
        result = await self.db.execute(
            select(TiedUpTransporter).where(
                TiedUpTransporter.customer_id == customer_id,
                TiedUpTransporter.transporter_id == transporter_id,
            )
        )
        return result.scalar_one_or_none()
