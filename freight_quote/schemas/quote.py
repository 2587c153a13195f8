"""Pydantic schemas for freight price quotation."""
from typing import List, Literal, Optional, Union
import math
import uuid

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from freight_quote.schemas.base import BaseCreateSchema


# ==================== REQUEST SCHEMAS ====================

class ShipmentLine(BaseModel):
    """One group of identical boxes. Dimensions in cm, weight in kg per box."""
    model_config = ConfigDict(extra='ignore', allow_inf_nan=False)

    length: float = Field(0.0, ge=0)
    width: float = Field(0.0, ge=0)
    height: float = Field(0.0, ge=0)
    weight: float = Field(0.0, ge=0)
    count: int = Field(0, ge=0)

    @field_validator('length', 'width', 'height', 'weight', 'count', mode='before')
    @classmethod
    def none_to_zero(cls, v):
        return 0 if v is None else v


class QuoteRequest(BaseCreateSchema):
    """
    Shipment to be priced.

    The shipment is given either as `shipment_details` lines or through the
    legacy single-box fields (noofboxes, length, width, height, weight).
    """
    customer_id: uuid.UUID
    mode_of_transport: str = Field(..., min_length=1)
    from_pincode: int = Field(..., gt=0)
    to_pincode: int = Field(..., gt=0)

    shipment_details: Optional[List[ShipmentLine]] = None

    # Legacy single-box form
    noofboxes: Optional[int] = Field(None, ge=0)
    length: Optional[float] = Field(None, ge=0, allow_inf_nan=False)
    width: Optional[float] = Field(None, ge=0, allow_inf_nan=False)
    height: Optional[float] = Field(None, ge=0, allow_inf_nan=False)
    weight: Optional[float] = Field(None, ge=0, allow_inf_nan=False)

    @property
    def has_legacy_geometry(self) -> bool:
        return all(
            value is not None
            for value in (self.noofboxes, self.length, self.width, self.height, self.weight)
        )

    @model_validator(mode='after')
    def require_shipment(self):
        if not self.shipment_details and not self.has_legacy_geometry:
            raise ValueError(
                "Missing required fields. Provide shipment_details or legacy "
                "noofboxes/length/width/height/weight parameters."
            )
        for line in self.shipment_lines():
            volume = line.length * line.width * line.height * line.count
            if not math.isfinite(volume) or not math.isfinite(line.weight * line.count):
                raise ValueError("Shipment dimensions or weight are out of range.")
        return self

    def shipment_lines(self) -> List[ShipmentLine]:
        """Canonical line list; shipment_details win over the legacy fields."""
        if self.shipment_details:
            return list(self.shipment_details)
        return [
            ShipmentLine(
                length=self.length,
                width=self.width,
                height=self.height,
                weight=self.weight,
                count=self.noofboxes,
            )
        ]


# ==================== RESPONSE SCHEMAS ====================

class ChargeBreakdown(BaseModel):
    """Itemized freight charges for one carrier."""
    unit_price: float
    base_freight: float
    docket_charge: float = 0.0
    min_charges: float = 0.0
    green_tax: float = 0.0
    dacc_charges: float = 0.0
    misc_charges: float = 0.0
    fuel_charges: float = 0.0
    rov_charges: float = 0.0
    insurance_charges: float = 0.0
    oda_charges: float = 0.0
    handling_charges: float = 0.0
    fm_charges: float = 0.0
    appointment_charges: float = 0.0
    total_charges: float


class CarrierQuote(ChargeBreakdown):
    """Fully disclosed quote."""
    company_id: uuid.UUID
    company_name: str
    origin_pincode: int
    destination_pincode: int
    estimated_time: float
    distance: str
    actual_weight: float
    volumetric_weight: float
    chargeable_weight: float
    is_hidden: Literal[False] = False


class HiddenQuote(BaseModel):
    """Public quote shown to customers without a subscription: price only."""
    model_config = ConfigDict(extra='forbid')

    total_charges: float
    is_hidden: Literal[True] = True


PublicQuote = Union[CarrierQuote, HiddenQuote]


class QuoteResponse(BaseModel):
    """Quotation result: tied-up quotes in full, public quotes per visibility policy."""
    success: bool = True
    message: str = "Price calculated successfully"
    tied_up_results: List[CarrierQuote] = []
    public_results: List[PublicQuote] = []
