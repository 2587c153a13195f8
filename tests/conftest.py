"""
Shared fixtures.

Settings are read at import time, so the test database and an empty Google
key are put in the environment before anything from freight_quote is imported.
"""
import os
import tempfile
import uuid

_DB_DIR = tempfile.mkdtemp(prefix="freight_quote_tests_")
os.environ["DATABASE_URL"] = f"sqlite+aiosqlite:///{os.path.join(_DB_DIR, 'test.db')}"
os.environ["GOOGLE_MAPS_API_KEY"] = ""

import httpx
import pytest
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import NullPool

from freight_quote.api.deps import get_distance_service, get_session_factory
from freight_quote.core.pincode_coordinates import PINCODE_COORDINATES
from freight_quote.database import Base, get_db
from freight_quote.main import app
from freight_quote.models import (
    Customer,
    TiedUpTransporter,
    Transporter,
    TransporterPrice,
    TransporterServiceability,
)
from freight_quote.services.distance_service import DistanceService


DELHI = 110001
MUMBAI = 400001


# =============================================================================
# DATABASE
# =============================================================================

@pytest.fixture
async def engine():
    """Fresh schema on a temporary SQLite file for every test."""
    engine = create_async_engine(os.environ["DATABASE_URL"], poolclass=NullPool)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest.fixture
def session_factory(engine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
def distance_service() -> DistanceService:
    """Local-only distance service over the bundled coordinates."""
    return DistanceService(api_key="", coordinates=dict(PINCODE_COORDINATES))


@pytest.fixture
async def client(session_factory, distance_service):
    """HTTP client against the app with database and distance overridden."""
    async def override_get_db():
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_session_factory] = lambda: session_factory
    app.dependency_overrides[get_distance_service] = lambda: distance_service

    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


# =============================================================================
# MARKETPLACE DATA
# =============================================================================

def _transporter(name, service, zone_rates=None, price_rate=None, is_active=True):
    transporter = Transporter(id=uuid.uuid4(), company_name=name, is_active=is_active)
    transporter.serviceability = [
        TransporterServiceability(pincode=pincode, zone=zone, is_oda=is_oda)
        for pincode, (zone, is_oda) in service.items()
    ]
    if zone_rates is not None:
        transporter.price = TransporterPrice(zone_rates=zone_rates, price_rate=price_rate or {})
    return transporter


ROUTE_SERVICE = {DELHI: ("N1", False), MUMBAI: ("W1", False)}


@pytest.fixture
async def marketplace(session_factory) -> dict:
    """
    Delhi -> Mumbai marketplace.

    - Alpha Logistics: tied-up with the customers at 10/kg, no public rate card
    - Bravo Freight: public at 9/kg
    - Delta Cargo: public at 12/kg
    - Echo Express: public at 5/kg but origin is ODA
    - Foxtrot Movers: public, no price for N1 -> W1
    - Golf Transport: public at 1/kg but inactive
    - Hotel Carriers: serves Delhi only
    """
    alpha = _transporter("Alpha Logistics", ROUTE_SERVICE)
    bravo = _transporter("Bravo Freight", ROUTE_SERVICE, {"N1": {"W1": 9}})
    delta = _transporter("Delta Cargo", ROUTE_SERVICE, {"N1": {"W1": 12}})
    echo = _transporter(
        "Echo Express",
        {DELHI: ("N1", True), MUMBAI: ("W1", False)},
        {"N1": {"W1": 5}},
    )
    foxtrot = _transporter("Foxtrot Movers", ROUTE_SERVICE, {"N1": {"S1": 4}})
    golf = _transporter("Golf Transport", ROUTE_SERVICE, {"N1": {"W1": 1}}, is_active=False)
    hotel = _transporter("Hotel Carriers", {DELHI: ("N1", False)}, {"N1": {"N1": 2}})

    free = Customer(id=uuid.uuid4(), name="Free Shipper", is_subscribed=False)
    paid = Customer(id=uuid.uuid4(), name="Paid Shipper", is_subscribed=True)
    loner = Customer(id=uuid.uuid4(), name="No Tie-ups", is_subscribed=False)

    def tie_up(customer):
        return TiedUpTransporter(
            customer_id=customer.id,
            transporter_id=alpha.id,
            vendor_code="ALP001",
            vendor_phone="9876543210",
            vendor_email="ops@alpha.example",
            gst_no="07ABCDE1234F1Z5",
            mode="road",
            address="1 Ring Road",
            state="Delhi",
            pincode=DELHI,
            price_rate={},
            price_chart={str(DELHI): {"W1": 10}},
        )

    async with session_factory() as session:
        session.add_all([alpha, bravo, delta, echo, foxtrot, golf, hotel, free, paid, loner])
        await session.flush()
        session.add_all([tie_up(free), tie_up(paid)])
        await session.commit()

    return {
        "alpha": alpha.id,
        "bravo": bravo.id,
        "delta": delta.id,
        "echo": echo.id,
        "foxtrot": foxtrot.id,
        "golf": golf.id,
        "hotel": hotel.id,
        "free": free.id,
        "paid": paid.id,
        "loner": loner.id,
    }


@pytest.fixture
def quote_payload():
    """One 100 kg box, 10x10x10 cm: chargeable weight 100 kg."""
    def build(customer_id, **overrides):
        payload = {
            "customer_id": str(customer_id),
            "mode_of_transport": "road",
            "from_pincode": DELHI,
            "to_pincode": MUMBAI,
            "noofboxes": 1,
            "length": 10,
            "width": 10,
            "height": 10,
            "weight": 100,
        }
        payload.update(overrides)
        return payload
    return build
