from typing import Annotated, Optional
import logging

from fastapi import Depends, Header, Response
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from freight_quote.database import get_db, async_session_factory
from freight_quote.core.request_context import QuoteContext
from freight_quote.services.distance_service import DistanceService


logger = logging.getLogger(__name__)


def get_session_factory() -> async_sessionmaker[AsyncSession]:
    """Factory for short-lived sessions, one per concurrent read."""
    return async_session_factory


_distance_service: Optional[DistanceService] = None


def get_distance_service() -> DistanceService:
    """Shared distance service built from settings."""
    global _distance_service
    if _distance_service is None:
        _distance_service = DistanceService()
    return _distance_service


def get_request_context(
    response: Response,
    x_request_id: Annotated[Optional[str], Header()] = None,
) -> QuoteContext:
    """
    Request-scoped context for quotation logging.
    Uses the caller's X-Request-ID when given and echoes it back.
    """
    context = QuoteContext(x_request_id)
    response.headers["X-Request-ID"] = context.request_id
    return context


# Type aliases for dependency injection
DB = Annotated[AsyncSession, Depends(get_db)]
SessionFactory = Annotated[async_sessionmaker[AsyncSession], Depends(get_session_factory)]
Distance = Annotated[DistanceService, Depends(get_distance_service)]
RequestContext = Annotated[QuoteContext, Depends(get_request_context)]
