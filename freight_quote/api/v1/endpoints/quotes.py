"""Price quotation API endpoints."""
import logging

from fastapi import APIRouter, HTTPException, status

from freight_quote.api.deps import Distance, RequestContext, SessionFactory
from freight_quote.schemas.quote import QuoteRequest, QuoteResponse
from freight_quote.services.carrier_repository import CarrierRepository
from freight_quote.services.quote_service import (
    CustomerLookupError,
    CustomerNotFoundError,
    QuoteService,
    QuoteServiceError,
)

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post(
    "/calculate",
    response_model=QuoteResponse,
    summary="Quote a shipment across carriers",
)
async def calculate_price(
    data: QuoteRequest,
    session_factory: SessionFactory,
    distance_service: Distance,
    context: RequestContext,
):
    """
    Quote a shipment.

    Tied-up carriers are always returned in full. Public carriers dearer than
    the cheapest tied-up quote are dropped; for customers without a
    subscription the rest show only their total.
    """
    service = QuoteService(CarrierRepository(session_factory), distance_service)
    try:
        return await service.quote(data, context)
    except CustomerNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=e.message)
    except CustomerLookupError as e:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=e.message)
    except QuoteServiceError as e:
        context.log.error(f"Quote failed: {e.message} {e.details}")
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=e.message)
