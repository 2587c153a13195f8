"""
Carrier Repository.

Read-only access to the data a quotation needs:
1. Customer subscription
2. Customer tie-ups with their negotiated price charts
3. Carriers serving both ends of a route
4. Public rate cards, batched
5. A single carrier with its service table

Each read opens its own short-lived session so reads can run concurrently.
"""
import logging
import uuid
from typing import Dict, Iterable, List, Optional

from pydantic import ValidationError
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from freight_quote.models.customer import Customer
from freight_quote.models.tied_up import TiedUpTransporter
from freight_quote.models.transporter import (
    Transporter,
    TransporterPrice,
    TransporterServiceability,
)
from freight_quote.services.pricing_engine import Carrier, RateCard, ServiceEntry

logger = logging.getLogger(__name__)


class CustomerAccount:
    """Customer as seen by the quotation engine."""
    def __init__(self, id: uuid.UUID, is_subscribed: bool):
        self.id = id
        self.is_subscribed = is_subscribed


class TiedUpRelationship:
    """Customer to carrier tie-up with its negotiated rate card."""
    def __init__(
        self,
        id: uuid.UUID,
        customer_id: uuid.UUID,
        carrier_id: uuid.UUID,
        rate_card: RateCard,
    ):
        self.id = id
        self.customer_id = customer_id
        self.carrier_id = carrier_id
        self.rate_card = rate_card


def _service_table(rows: Iterable[TransporterServiceability]) -> Dict[int, ServiceEntry]:
    return {row.pincode: ServiceEntry(zone=row.zone, is_oda=row.is_oda) for row in rows}


class CarrierRepository:
    """Async SQLAlchemy reads for carriers, rate cards, tie-ups and customers."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        self.session_factory = session_factory

    async def get_customer_subscription(self, customer_id: uuid.UUID) -> Optional[CustomerAccount]:
        async with self.session_factory() as session:
            result = await session.execute(
                select(Customer.id, Customer.is_subscribed).where(Customer.id == customer_id)
            )
            row = result.one_or_none()
        if row is None:
            return None
        return CustomerAccount(id=row.id, is_subscribed=bool(row.is_subscribed))

    async def get_tied_up_relationships(self, customer_id: uuid.UUID) -> List[TiedUpRelationship]:
        """Tie-ups of a customer. A tie-up with an unreadable price_rate is skipped."""
        async with self.session_factory() as session:
            result = await session.execute(
                select(TiedUpTransporter).where(TiedUpTransporter.customer_id == customer_id)
            )
            tied_ups = result.scalars().all()

        relationships = []
        for tied_up in tied_ups:
            try:
                rate_card = RateCard.from_price_chart(tied_up.price_rate, tied_up.price_chart)
            except ValidationError as e:
                logger.warning(f"Skipping tie-up {tied_up.id}: invalid price_rate: {e}")
                continue
            relationships.append(TiedUpRelationship(
                id=tied_up.id,
                customer_id=tied_up.customer_id,
                carrier_id=tied_up.transporter_id,
                rate_card=rate_card,
            ))
        return relationships

    async def find_serviceable_carriers(
        self,
        origin_pincode: int,
        destination_pincode: int,
    ) -> List[Carrier]:
        """
        Active carriers serving both pincodes.

        The service table of each carrier holds only the two route pincodes.
        """
        pincodes = {origin_pincode, destination_pincode}
        async with self.session_factory() as session:
            result = await session.execute(
                select(TransporterServiceability, Transporter.company_name)
                .join(Transporter, Transporter.id == TransporterServiceability.transporter_id)
                .where(
                    TransporterServiceability.pincode.in_(pincodes),
                    Transporter.is_active == True,
                )
                .order_by(Transporter.company_name)
            )
            rows = result.all()

        carriers: Dict[uuid.UUID, Carrier] = {}
        for entry, company_name in rows:
            carrier = carriers.get(entry.transporter_id)
            if carrier is None:
                carrier = carriers[entry.transporter_id] = Carrier(
                    id=entry.transporter_id, name=company_name
                )
            carrier.service[entry.pincode] = ServiceEntry(zone=entry.zone, is_oda=entry.is_oda)

        return [c for c in carriers.values() if pincodes.issubset(c.service)]

    async def get_rate_cards(self, carrier_ids: Iterable[uuid.UUID]) -> Dict[uuid.UUID, RateCard]:
        """Public rate cards of several carriers in one query."""
        carrier_ids = list(carrier_ids)
        if not carrier_ids:
            return {}

        async with self.session_factory() as session:
            result = await session.execute(
                select(TransporterPrice).where(TransporterPrice.transporter_id.in_(carrier_ids))
            )
            prices = result.scalars().all()

        rate_cards = {}
        for price in prices:
            try:
                rate_cards[price.transporter_id] = RateCard.from_zone_rates(
                    price.price_rate, price.zone_rates
                )
            except ValidationError as e:
                logger.warning(f"Skipping rate card of {price.transporter_id}: {e}")
        return rate_cards

    async def get_carrier_by_id(
        self,
        carrier_id: uuid.UUID,
        pincodes: Optional[Iterable[int]] = None,
    ) -> Optional[Carrier]:
        """Carrier with its service table, limited to `pincodes` when given."""
        async with self.session_factory() as session:
            transporter = await session.get(Transporter, carrier_id)
            if transporter is None:
                return None

            query = select(TransporterServiceability).where(
                TransporterServiceability.transporter_id == carrier_id
            )
            if pincodes is not None:
                query = query.where(TransporterServiceability.pincode.in_(list(pincodes)))
            result = await session.execute(query)
            entries = result.scalars().all()

        return Carrier(
            id=transporter.id,
            name=transporter.company_name,
            service=_service_table(entries),
        )
