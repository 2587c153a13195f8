"""
Tests for weight calculation, charge computation and per-carrier quoting.

Run with: pytest tests/test_pricing_engine.py -v
"""
import uuid

import pytest
from pydantic import ValidationError

from freight_quote.schemas.quote import QuoteRequest, ShipmentLine
from freight_quote.schemas.rate_card import DEFAULT_K_FACTOR, PriceRate
from freight_quote.services.pricing_engine import (
    Carrier,
    PincodeRateLookup,
    QuoteRoute,
    RateCard,
    ServiceEntry,
    ZoneRateLookup,
    calculate_weights,
    compute_charges,
    quote_carrier,
)


DELHI = 110001
MUMBAI = 400001


# =============================================================================
# FIXTURES
# =============================================================================

@pytest.fixture
def route() -> QuoteRoute:
    return QuoteRoute(DELHI, MUMBAI, estimated_days=3, distance="1167 km")


@pytest.fixture
def heavy_box() -> list:
    """One 100 kg box with negligible volume."""
    return [ShipmentLine(length=10, width=10, height=10, weight=100, count=1)]


@pytest.fixture
def full_price_rate() -> PriceRate:
    """Rate card with every charge configured, in the uploaded camelCase form."""
    return PriceRate.model_validate({
        "docketCharges": 50,
        "minCharges": 20,
        "greenTax": 10,
        "daccCharges": 5,
        "miscellanousCharges": 15,
        "fuel": 10,
        "rovCharges": {"fixed": 100, "variable": 5},
        "insuaranceCharges": {"fixed": 0, "variable": 1},
        "fmCharges": {"fixed": 25, "variable": 0},
        "appointmentCharges": {},
        "handlingCharges": {"fixed": 30, "variable": 50},
        "odaCharges": {"fixed": 40, "variable": 20},
    })


def carrier(service=None, name="Bravo Freight") -> Carrier:
    service = service or {
        DELHI: ServiceEntry("N1"),
        MUMBAI: ServiceEntry("W1"),
    }
    return Carrier(id=uuid.uuid4(), name=name, service=service)


# =============================================================================
# TESTS: WEIGHTS
# =============================================================================

class TestCalculateWeights:
    """Tests for calculate_weights."""

    def test_volumetric_ceiling_is_per_line(self):
        """Two 0.2 kg volumetric lines bill 1 kg each, not ceil(0.4) = 1 overall."""
        lines = [
            ShipmentLine(length=10, width=10, height=10, weight=0, count=1),
            ShipmentLine(length=10, width=10, height=10, weight=0, count=1),
        ]
        weights = calculate_weights(lines, DEFAULT_K_FACTOR)

        assert weights.volumetric_weight == 2

    def test_count_multiplies_volume_before_ceiling(self):
        lines = [ShipmentLine(length=50, width=50, height=50, weight=1, count=3)]
        weights = calculate_weights(lines, 5000)

        # 50*50*50*3 / 5000 = 75
        assert weights.volumetric_weight == 75
        assert weights.actual_weight == 3

    def test_chargeable_is_max_of_actual_and_volumetric(self, heavy_box):
        weights = calculate_weights(heavy_box, DEFAULT_K_FACTOR)
        assert weights.actual_weight == 100
        assert weights.volumetric_weight == 1
        assert weights.chargeable_weight == 100

        bulky = [ShipmentLine(length=100, width=100, height=100, weight=20, count=1)]
        weights = calculate_weights(bulky, DEFAULT_K_FACTOR)
        assert weights.chargeable_weight == weights.volumetric_weight == 200

    def test_carrier_k_factor_changes_volumetric(self):
        lines = [ShipmentLine(length=100, width=100, height=100, weight=0, count=1)]

        assert calculate_weights(lines, 4000).volumetric_weight == 250
        assert calculate_weights(lines, 6000).volumetric_weight == 167

    def test_missing_numbers_default_to_zero(self):
        line = ShipmentLine.model_validate({"length": None, "weight": 5, "count": 2})
        weights = calculate_weights([line], DEFAULT_K_FACTOR)

        assert weights.volumetric_weight == 0
        assert weights.chargeable_weight == 10


# =============================================================================
# TESTS: PRICE RATE DEFAULTS
# =============================================================================

class TestPriceRate:
    """Tests for PriceRate resolution at load time."""

    def test_empty_document_resolves_to_zero_charges(self):
        rate = PriceRate.model_validate({})

        assert rate.k_factor == DEFAULT_K_FACTOR
        assert rate.docket_charges == 0
        assert rate.rov_charges.fixed == 0
        assert rate.oda_charges.variable == 0

    def test_divisor_is_accepted_as_k_factor(self):
        assert PriceRate.model_validate({"divisor": 4500}).k_factor == 4500

    def test_k_factor_wins_over_divisor(self):
        rate = PriceRate.model_validate({"kFactor": 6000, "divisor": 4500})
        assert rate.k_factor == 6000

    @pytest.mark.parametrize("value", [0, -10, "abc", None, float("nan")])
    def test_unusable_k_factor_falls_back_to_default(self, value):
        assert PriceRate.model_validate({"kFactor": value}).k_factor == DEFAULT_K_FACTOR

    @pytest.mark.parametrize("document", [
        {"fuel": float("nan")},
        {"docketCharges": float("inf")},
        {"rovCharges": {"fixed": float("nan"), "variable": 1}},
        {"odaCharges": {"fixed": 0, "variable": float("-inf")}},
    ])
    def test_non_finite_charges_are_rejected(self, document):
        with pytest.raises(ValidationError):
            PriceRate.model_validate(document)

    def test_null_and_partial_components(self):
        rate = PriceRate.model_validate({
            "rovCharges": None,
            "handlingCharges": {"fixed": 12},
            "greenTax": None,
        })

        assert rate.rov_charges.fixed == 0 and rate.rov_charges.variable == 0
        assert rate.handling_charges.fixed == 12
        assert rate.handling_charges.variable == 0
        assert rate.green_tax == 0

    def test_document_keeps_uploaded_keys(self, full_price_rate):
        document = full_price_rate.to_document()

        assert document["miscellanousCharges"] == 15
        assert document["insuaranceCharges"] == {"fixed": 0, "variable": 1}
        assert document["kFactor"] == DEFAULT_K_FACTOR


# =============================================================================
# TESTS: CHARGES
# =============================================================================

class TestComputeCharges:
    """Tests for compute_charges."""

    def test_full_breakdown_with_oda_destination(self, full_price_rate):
        breakdown = compute_charges(100, 10, full_price_rate, destination_is_oda=True)

        assert breakdown.base_freight == 1000
        assert breakdown.docket_charge == 50
        assert breakdown.fuel_charges == pytest.approx(100)
        assert breakdown.rov_charges == 100          # max(100, 5% of 1000)
        assert breakdown.insurance_charges == pytest.approx(10)
        assert breakdown.fm_charges == 25
        assert breakdown.appointment_charges == 0
        assert breakdown.handling_charges == pytest.approx(80)   # 30 + 50% of 100 kg
        assert breakdown.oda_charges == pytest.approx(60)        # 40 + 20% of 100 kg
        assert breakdown.total_charges == pytest.approx(1475)

    def test_greater_of_is_not_additive(self):
        rate = PriceRate.model_validate({"rovCharges": {"fixed": 100, "variable": 20}})
        breakdown = compute_charges(100, 10, rate, destination_is_oda=False)

        # 20% of 1000 beats the fixed 100; never 300
        assert breakdown.rov_charges == pytest.approx(200)

    def test_oda_is_zero_when_destination_is_serviced(self, full_price_rate):
        breakdown = compute_charges(100, 10, full_price_rate, destination_is_oda=False)

        assert breakdown.oda_charges == 0
        assert breakdown.total_charges == pytest.approx(1415)

    def test_handling_applies_without_oda(self):
        rate = PriceRate.model_validate({"handlingCharges": {"fixed": 10, "variable": 100}})
        breakdown = compute_charges(25, 4, rate, destination_is_oda=False)

        assert breakdown.handling_charges == pytest.approx(35)
        assert breakdown.total_charges == pytest.approx(135)


# =============================================================================
# TESTS: ROUTE RATE LOOKUP
# =============================================================================

class TestRouteRateLookup:
    """Tests for zone and pincode keyed unit prices."""

    def test_zone_lookup(self):
        lookup = ZoneRateLookup({"N1": {"W1": 9.5}})
        assert lookup.unit_price(DELHI, ServiceEntry("N1"), ServiceEntry("W1")) == 9.5
        assert lookup.unit_price(DELHI, ServiceEntry("N2"), ServiceEntry("W1")) is None
        assert lookup.unit_price(DELHI, ServiceEntry("N1"), ServiceEntry("S1")) is None

    def test_pincode_lookup_uses_origin_pincode(self):
        lookup = PincodeRateLookup({str(DELHI): {"W1": 11}})
        assert lookup.unit_price(DELHI, ServiceEntry("N1"), ServiceEntry("W1")) == 11
        assert lookup.unit_price(MUMBAI, ServiceEntry("N1"), ServiceEntry("W1")) is None

    @pytest.mark.parametrize("price", [0, -3, "", "n/a", None, True])
    def test_unusable_price_means_no_rate(self, price):
        lookup = ZoneRateLookup({"N1": {"W1": price}})
        assert lookup.unit_price(DELHI, ServiceEntry("N1"), ServiceEntry("W1")) is None

    def test_numeric_string_price(self):
        lookup = ZoneRateLookup({"N1": {"W1": "7.25"}})
        assert lookup.unit_price(DELHI, ServiceEntry("N1"), ServiceEntry("W1")) == 7.25


# =============================================================================
# TESTS: CARRIER QUOTE
# =============================================================================

class TestQuoteCarrier:
    """Tests for quote_carrier eligibility and assembly."""

    def test_quote_carries_route_and_weights(self, heavy_box, route):
        bravo = carrier()
        card = RateCard.from_zone_rates({}, {"N1": {"W1": 9}})

        quote = quote_carrier(bravo, card, heavy_box, route)

        assert quote.company_id == bravo.id
        assert quote.company_name == "Bravo Freight"
        assert quote.origin_pincode == DELHI
        assert quote.destination_pincode == MUMBAI
        assert quote.distance == "1167 km"
        assert quote.estimated_time == 3
        assert quote.chargeable_weight == 100
        assert quote.total_charges == pytest.approx(900)
        assert quote.is_hidden is False

    def test_origin_oda_disqualifies(self, heavy_box, route):
        echo = carrier({DELHI: ServiceEntry("N1", is_oda=True), MUMBAI: ServiceEntry("W1")})
        card = RateCard.from_zone_rates({}, {"N1": {"W1": 5}})

        assert quote_carrier(echo, card, heavy_box, route) is None

    def test_destination_oda_adds_surcharge(self, heavy_box, route):
        remote = carrier({DELHI: ServiceEntry("N1"), MUMBAI: ServiceEntry("W1", is_oda=True)})
        card = RateCard.from_zone_rates(
            {"odaCharges": {"fixed": 100, "variable": 0}},
            {"N1": {"W1": 9}},
        )

        quote = quote_carrier(remote, card, heavy_box, route)

        assert quote.oda_charges == 100
        assert quote.total_charges == pytest.approx(1000)

    def test_unserviced_destination(self, heavy_box, route):
        partial = carrier({DELHI: ServiceEntry("N1")})
        card = RateCard.from_zone_rates({}, {"N1": {"W1": 9}})

        assert quote_carrier(partial, card, heavy_box, route) is None

    def test_missing_rate_card_or_zone_price(self, heavy_box, route):
        assert quote_carrier(carrier(), None, heavy_box, route) is None

        card = RateCard.from_zone_rates({}, {"N1": {"S1": 9}})
        assert quote_carrier(carrier(), card, heavy_box, route) is None

    def test_tied_up_price_chart(self, heavy_box, route):
        card = RateCard.from_price_chart({"docketCharges": 100}, {str(DELHI): {"W1": 10}})

        quote = quote_carrier(carrier(name="Alpha Logistics"), card, heavy_box, route)

        assert quote.unit_price == 10
        assert quote.total_charges == pytest.approx(1100)


# =============================================================================
# TESTS: REQUEST NORMALISATION
# =============================================================================

class TestQuoteRequest:
    """Tests for the two shipment representations."""

    base = {
        "customer_id": str(uuid.uuid4()),
        "mode_of_transport": "road",
        "from_pincode": DELHI,
        "to_pincode": MUMBAI,
    }

    def test_legacy_fields_become_one_line(self):
        request = QuoteRequest.model_validate({
            **self.base,
            "noofboxes": 4, "length": 20, "width": 30, "height": 40, "weight": 2.5,
        })

        lines = request.shipment_lines()
        assert len(lines) == 1
        assert lines[0].count == 4
        assert calculate_weights(lines, DEFAULT_K_FACTOR).actual_weight == 10

    def test_shipment_details_win_over_legacy(self):
        request = QuoteRequest.model_validate({
            **self.base,
            "noofboxes": 1, "length": 1, "width": 1, "height": 1, "weight": 1,
            "shipment_details": [
                {"length": 10, "width": 10, "height": 10, "weight": 3, "count": 2},
                {"length": 5, "width": 5, "height": 5, "weight": 1, "count": 1},
            ],
        })

        lines = request.shipment_lines()
        assert len(lines) == 2
        assert calculate_weights(lines, DEFAULT_K_FACTOR).actual_weight == 7

    def test_missing_shipment_is_rejected(self):
        with pytest.raises(ValidationError, match="shipment_details"):
            QuoteRequest.model_validate(self.base)

    def test_incomplete_legacy_geometry_is_rejected(self):
        with pytest.raises(ValidationError):
            QuoteRequest.model_validate({**self.base, "noofboxes": 1, "weight": 5})

    def test_empty_shipment_details_without_legacy_is_rejected(self):
        with pytest.raises(ValidationError):
            QuoteRequest.model_validate({**self.base, "shipment_details": []})

    @pytest.mark.parametrize("overrides", [
        {"length": float("inf")},
        {"weight": float("nan")},
        {"length": 1e200, "width": 1e200},
        {"weight": 1e300, "noofboxes": 10**10},
    ])
    def test_out_of_range_legacy_shipment_is_rejected(self, overrides):
        payload = {
            **self.base,
            "noofboxes": 1, "length": 10, "width": 10, "height": 10, "weight": 5,
            **overrides,
        }
        with pytest.raises(ValidationError):
            QuoteRequest.model_validate(payload)

    def test_out_of_range_shipment_line_is_rejected(self):
        with pytest.raises(ValidationError, match="out of range"):
            QuoteRequest.model_validate({
                **self.base,
                "shipment_details": [
                    {"length": 1e200, "width": 1e200, "height": 1, "weight": 1, "count": 1},
                ],
            })

    def test_pincodes_and_mode_are_required(self):
        with pytest.raises(ValidationError):
            QuoteRequest.model_validate({
                "customer_id": str(uuid.uuid4()),
                "mode_of_transport": "",
                "from_pincode": DELHI,
                "noofboxes": 1, "length": 1, "width": 1, "height": 1, "weight": 1,
            })
