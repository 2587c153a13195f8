"""
Request-scoped quotation context.

Carries the correlation id of one quote request together with the customer
and route it is for. Every log line written through `context.log` is prefixed
with the request id so a single quotation can be followed across the
concurrent carrier evaluations.

Usage:

    context = QuoteContext(request.headers.get("X-Request-ID"))
    context.bind(customer_id, from_pincode, to_pincode)
    async with context.timed("distance"):
        estimate = await distance_service.resolve(...)
"""

import logging
import time
import uuid
from contextlib import asynccontextmanager
from typing import Optional, AsyncIterator

logger = logging.getLogger("freight_quote.quote")


class QuoteLogAdapter(logging.LoggerAdapter):
    """Prefixes messages with the request id."""

    def process(self, msg, kwargs):
        return f"[{self.extra['request_id']}] {msg}", kwargs


class QuoteContext:
    """Correlation id, customer and route of one quotation request."""

    def __init__(self, request_id: Optional[str] = None):
        self.request_id = request_id or uuid.uuid4().hex
        self.customer_id: Optional[uuid.UUID] = None
        self.origin_pincode: Optional[int] = None
        self.destination_pincode: Optional[int] = None
        self.log = QuoteLogAdapter(logger, {"request_id": self.request_id})

    def bind(
        self,
        customer_id: uuid.UUID,
        origin_pincode: int,
        destination_pincode: int,
    ) -> "QuoteContext":
        self.customer_id = customer_id
        self.origin_pincode = origin_pincode
        self.destination_pincode = destination_pincode
        return self

    def describe(self) -> str:
        return (
            f"customer={self.customer_id} "
            f"route={self.origin_pincode}->{self.destination_pincode}"
        )

    @asynccontextmanager
    async def timed(self, label: str) -> AsyncIterator[None]:
        """Log the wall time of the enclosed block at debug level."""
        started = time.perf_counter()
        try:
            yield
        finally:
            elapsed_ms = (time.perf_counter() - started) * 1000
            self.log.debug(f"{label} took {elapsed_ms:.1f}ms")
