"""Pydantic schemas for Transporter/Carrier models."""
from pydantic import BaseModel

from freight_quote.schemas.base import BaseResponseSchema
from typing import Optional, List
from datetime import datetime
import uuid


class TransporterResponse(BaseResponseSchema):
    """Transporter details, without the service table."""
    id: uuid.UUID
    company_name: str
    vendor_code: Optional[str] = None
    contact_phone: Optional[str] = None
    contact_email: Optional[str] = None
    gst_no: Optional[str] = None
    address: Optional[str] = None
    state: Optional[str] = None
    pincode: Optional[int] = None
    is_active: bool
    created_at: datetime
    updated_at: datetime


class TransporterListResponse(BaseModel):
    success: bool = True
    message: str = "Transporters fetched successfully"
    data: List[TransporterResponse]
