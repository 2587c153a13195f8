# Services module
from freight_quote.services.distance_service import DistanceService
from freight_quote.services.carrier_repository import CarrierRepository
from freight_quote.services.quote_service import QuoteService
from freight_quote.services.tied_up_service import TiedUpService

__all__ = [
    "DistanceService",
    "CarrierRepository",
    "QuoteService",
    "TiedUpService",
]
