"""
Pricing Engine Service for freight quotation.

This service handles:
1. Weight calculation (actual vs volumetric, per shipment line)
2. Unit price lookup (zone rate cards and tied-up price charts)
3. Itemized charge computation from a carrier's PriceRate
4. Per-carrier eligibility and quote assembly
"""
from abc import ABC, abstractmethod
from typing import Dict, Iterable, List, Optional
import logging
import math
import uuid

from freight_quote.schemas.quote import CarrierQuote, ChargeBreakdown, ShipmentLine
from freight_quote.schemas.rate_card import PriceRate, ChargeComponent

logger = logging.getLogger(__name__)


class ServiceEntry:
    """Service table entry of a carrier for one pincode."""
    def __init__(self, zone: str, is_oda: bool = False):
        self.zone = zone
        self.is_oda = is_oda

    def __repr__(self) -> str:
        return f"ServiceEntry(zone={self.zone!r}, is_oda={self.is_oda})"


class Carrier:
    """Carrier with its service table, keyed by pincode."""
    def __init__(
        self,
        id: uuid.UUID,
        name: str,
        service: Optional[Dict[int, ServiceEntry]] = None,
    ):
        self.id = id
        self.name = name
        self.service = service or {}


class ShipmentWeights:
    """Actual, volumetric and chargeable weight of a shipment in kg."""
    def __init__(self, actual_weight: float, volumetric_weight: float):
        self.actual_weight = actual_weight
        self.volumetric_weight = volumetric_weight
        self.chargeable_weight = max(volumetric_weight, actual_weight)


# ============================================
# WEIGHT CALCULATIONS
# ============================================

def calculate_weights(lines: Iterable[ShipmentLine], k_factor: float) -> ShipmentWeights:
    """
    Calculate shipment weights for a carrier's volumetric divisor.

    The volumetric ceiling is taken per line, so two half-kg lines bill as 2 kg.
    """
    actual = 0.0
    volumetric = 0
    for line in lines:
        actual += line.weight * line.count
        volume = line.length * line.width * line.height * line.count
        volumetric += math.ceil(volume / k_factor)
    return ShipmentWeights(actual_weight=actual, volumetric_weight=float(volumetric))


# ============================================
# ROUTE RATE LOOKUP
# ============================================

def _as_unit_price(value) -> Optional[float]:
    if isinstance(value, bool):
        return None
    try:
        price = float(value)
    except (TypeError, ValueError):
        return None
    if not math.isfinite(price) or price <= 0:
        return None
    return price


class RouteRateLookup(ABC):
    """Resolves the per-kg unit price for a route, or None when the route is not priced."""

    @abstractmethod
    def unit_price(
        self,
        origin_pincode: int,
        origin: ServiceEntry,
        destination: ServiceEntry,
    ) -> Optional[float]:
        ...


class ZoneRateLookup(RouteRateLookup):
    """Public rate card: zone_rates[origin zone][destination zone]."""

    def __init__(self, zone_rates: Optional[dict]):
        self.zone_rates = zone_rates or {}

    def unit_price(self, origin_pincode, origin, destination):
        row = self.zone_rates.get(origin.zone)
        if not isinstance(row, dict):
            return None
        return _as_unit_price(row.get(destination.zone))


class PincodeRateLookup(RouteRateLookup):
    """Tied-up price chart: price_chart[origin pincode][destination zone]."""

    def __init__(self, price_chart: Optional[dict]):
        self.price_chart = price_chart or {}

    def unit_price(self, origin_pincode, origin, destination):
        row = self.price_chart.get(str(origin_pincode))
        if not isinstance(row, dict):
            return None
        return _as_unit_price(row.get(destination.zone))


class RateCard:
    """Charge configuration of a carrier plus its route price lookup."""
    def __init__(self, price_rate: PriceRate, lookup: RouteRateLookup):
        self.price_rate = price_rate
        self.lookup = lookup

    @classmethod
    def from_zone_rates(cls, price_rate: Optional[dict], zone_rates: Optional[dict]) -> "RateCard":
        return cls(PriceRate.model_validate(price_rate or {}), ZoneRateLookup(zone_rates))

    @classmethod
    def from_price_chart(cls, price_rate: Optional[dict], price_chart: Optional[dict]) -> "RateCard":
        return cls(PriceRate.model_validate(price_rate or {}), PincodeRateLookup(price_chart))


# ============================================
# CHARGE COMPUTATION
# ============================================

def _greater_of(component: ChargeComponent, base_freight: float) -> float:
    return max(component.fixed, component.variable / 100 * base_freight)


def _per_weight(component: ChargeComponent, chargeable_weight: float) -> float:
    return component.fixed + component.variable / 100 * chargeable_weight


def compute_charges(
    chargeable_weight: float,
    unit_price: float,
    price_rate: PriceRate,
    destination_is_oda: bool,
) -> ChargeBreakdown:
    """Itemized charges for a chargeable weight at a unit price."""
    base_freight = unit_price * chargeable_weight

    fuel_charges = price_rate.fuel / 100 * base_freight
    rov_charges = _greater_of(price_rate.rov_charges, base_freight)
    insurance_charges = _greater_of(price_rate.insurance_charges, base_freight)
    fm_charges = _greater_of(price_rate.fm_charges, base_freight)
    appointment_charges = _greater_of(price_rate.appointment_charges, base_freight)

    oda_charges = 0.0
    if destination_is_oda:
        oda_charges = _per_weight(price_rate.oda_charges, chargeable_weight)
    handling_charges = _per_weight(price_rate.handling_charges, chargeable_weight)

    total_charges = (
        base_freight
        + price_rate.docket_charges
        + price_rate.min_charges
        + price_rate.green_tax
        + price_rate.dacc_charges
        + price_rate.miscellaneous_charges
        + fuel_charges
        + rov_charges
        + insurance_charges
        + oda_charges
        + handling_charges
        + fm_charges
        + appointment_charges
    )

    return ChargeBreakdown(
        unit_price=unit_price,
        base_freight=base_freight,
        docket_charge=price_rate.docket_charges,
        min_charges=price_rate.min_charges,
        green_tax=price_rate.green_tax,
        dacc_charges=price_rate.dacc_charges,
        misc_charges=price_rate.miscellaneous_charges,
        fuel_charges=fuel_charges,
        rov_charges=rov_charges,
        insurance_charges=insurance_charges,
        oda_charges=oda_charges,
        handling_charges=handling_charges,
        fm_charges=fm_charges,
        appointment_charges=appointment_charges,
        total_charges=total_charges,
    )


# ============================================
# CARRIER QUOTE
# ============================================

class QuoteRoute:
    """Route and distance estimate shared by every carrier in a request."""
    def __init__(
        self,
        origin_pincode: int,
        destination_pincode: int,
        estimated_days: float,
        distance: str,
    ):
        self.origin_pincode = origin_pincode
        self.destination_pincode = destination_pincode
        self.estimated_days = estimated_days
        self.distance = distance


def quote_carrier(
    carrier: Carrier,
    rate_card: Optional[RateCard],
    lines: List[ShipmentLine],
    route: QuoteRoute,
    log: logging.LoggerAdapter = None,
) -> Optional[CarrierQuote]:
    """
    Price one carrier on a route.

    Returns None when the carrier is not quotable: origin or destination not
    serviced, origin out of delivery area, or no unit price for the zone pair.
    """
    log = log or logger
    origin = carrier.service.get(route.origin_pincode)
    destination = carrier.service.get(route.destination_pincode)

    if origin is None:
        log.info(f"{carrier.name}: origin {route.origin_pincode} not serviceable")
        return None
    if origin.is_oda:
        log.info(f"{carrier.name}: origin {route.origin_pincode} is ODA, skipping")
        return None
    if destination is None:
        log.info(f"{carrier.name}: destination {route.destination_pincode} not serviceable")
        return None
    if rate_card is None:
        log.info(f"{carrier.name}: no rate card")
        return None

    unit_price = rate_card.lookup.unit_price(route.origin_pincode, origin, destination)
    if unit_price is None:
        log.info(f"{carrier.name}: no unit price for {origin.zone} -> {destination.zone}")
        return None

    weights = calculate_weights(lines, rate_card.price_rate.k_factor)
    breakdown = compute_charges(
        weights.chargeable_weight,
        unit_price,
        rate_card.price_rate,
        destination.is_oda,
    )
    log.debug(
        f"{carrier.name}: chargeable {weights.chargeable_weight:.2f}kg, "
        f"total {breakdown.total_charges:.2f}"
    )

    return CarrierQuote(
        **breakdown.model_dump(),
        company_id=carrier.id,
        company_name=carrier.name,
        origin_pincode=route.origin_pincode,
        destination_pincode=route.destination_pincode,
        estimated_time=route.estimated_days,
        distance=route.distance,
        actual_weight=round(weights.actual_weight, 2),
        volumetric_weight=round(weights.volumetric_weight, 2),
        chargeable_weight=round(weights.chargeable_weight, 2),
    )
