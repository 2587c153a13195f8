from fastapi import APIRouter

from freight_quote.api.v1.endpoints import (
    quotes,
    tied_up,
    transporters,
)

api_router = APIRouter(prefix="/api/v1")

# ==================== Price Quotation ====================
api_router.include_router(
    quotes.router,
    prefix="/transporter",
    tags=["Price Quotation"]
)

# ==================== Tied-Up Transporters ====================
api_router.include_router(
    tied_up.router,
    prefix="/transporter",
    tags=["Tied-Up Transporters"]
)

# ==================== Transporter Lookup ====================
api_router.include_router(
    transporters.router,
    prefix="/transporter",
    tags=["Transporters/Carriers"]
)
