"""Pydantic schemas for customer tie-ups with transporters."""
from pydantic import BaseModel, Field, model_validator

from freight_quote.schemas.base import BaseCreateSchema, BaseResponseSchema
from freight_quote.schemas.rate_card import PriceRate
from typing import Optional, List, Dict
from datetime import datetime
import uuid


REQUIRED_TIED_UP_FIELDS = (
    "customer_id",
    "vendor_code",
    "vendor_phone",
    "vendor_email",
    "gst_no",
    "mode",
    "address",
    "state",
    "pincode",
    "rating",
    "company_name",
    "price_rate",
    "price_chart",
)


def _is_blank(value) -> bool:
    if value is None:
        return True
    if isinstance(value, str):
        return not value.strip()
    if isinstance(value, dict):
        return not value
    return False


class TiedUpCompanyCreate(BaseCreateSchema):
    """
    Register a negotiated price list with a transporter.

    price_chart is keyed by origin pincode, then destination zone:
    {"110001": {"N1": 12.5, "W1": 14.0}}
    """
    customer_id: Optional[uuid.UUID] = None
    company_name: Optional[str] = Field(None, max_length=200)
    vendor_code: Optional[str] = Field(None, max_length=50)
    vendor_phone: Optional[str] = Field(None, max_length=20)
    vendor_email: Optional[str] = Field(None, max_length=255)
    gst_no: Optional[str] = Field(None, max_length=15)
    mode: Optional[str] = Field(None, max_length=20)
    address: Optional[str] = None
    state: Optional[str] = Field(None, max_length=100)
    pincode: Optional[int] = Field(None, gt=0)
    rating: Optional[float] = Field(None, ge=0, le=5)
    price_rate: Optional[PriceRate] = None
    price_chart: Optional[Dict[str, Dict[str, float]]] = None

    @model_validator(mode='after')
    def require_all_fields(self):
        missing = [name for name in REQUIRED_TIED_UP_FIELDS if _is_blank(getattr(self, name))]
        if missing:
            raise ValueError(f"Missing required fields: {', '.join(missing)}")
        return self


class TiedUpCompanyResponse(BaseResponseSchema):
    """Tie-up response schema."""
    id: uuid.UUID
    customer_id: uuid.UUID
    transporter_id: uuid.UUID
    vendor_code: str
    vendor_phone: str
    vendor_email: str
    gst_no: str
    mode: str
    state: str
    pincode: int
    price_rate: dict
    price_chart: dict
    created_at: datetime


class TemporaryTransporterResponse(BaseResponseSchema):
    """Tie-up awaiting verification of an unlisted company."""
    id: uuid.UUID
    customer_id: uuid.UUID
    company_name: str
    vendor_code: str
    vendor_email: str
    mode: str
    pincode: int
    created_at: datetime
    verified_at: Optional[datetime] = None


class TiedUpCreateResult(BaseModel):
    success: bool = True
    message: str
    tied_up: Optional[TiedUpCompanyResponse] = None
    pending: Optional[TemporaryTransporterResponse] = None


class TiedUpListResponse(BaseModel):
    success: bool = True
    message: str = "Tied up companies fetched successfully"
    data: List[TiedUpCompanyResponse]
