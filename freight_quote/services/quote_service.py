"""
Quote Service.

Entry point of the quotation engine. For one shipment request it:
1. Resolves distance once and loads customer, tie-ups and serviceable carriers together
2. Fetches public rate cards in one batch
3. Prices every tied-up and public carrier concurrently, bounded by a semaphore
4. Applies the best-price and visibility policy once every tied-up quote is known

Carrier-level failures exclude that carrier. Only the customer lookup is fatal.
"""
import asyncio
import logging
import uuid
from typing import Any, Awaitable, Callable, Dict, List, Optional

from freight_quote.config import settings
from freight_quote.core.request_context import QuoteContext
from freight_quote.schemas.quote import CarrierQuote, QuoteRequest, QuoteResponse, ShipmentLine
from freight_quote.services.carrier_repository import (
    CarrierRepository,
    CustomerAccount,
    TiedUpRelationship,
)
from freight_quote.services.distance_service import DistanceService
from freight_quote.services.pricing_engine import Carrier, QuoteRoute, RateCard, quote_carrier
from freight_quote.services.quote_policy import apply_visibility

logger = logging.getLogger(__name__)


class QuoteServiceError(Exception):
    """Custom exception for quotation errors."""
    def __init__(self, message: str, details: Dict = None):
        self.message = message
        self.details = details or {}
        super().__init__(self.message)


class CustomerNotFoundError(QuoteServiceError):
    """Raised when the requesting customer does not exist."""
    pass


class CustomerLookupError(QuoteServiceError):
    """Raised when the customer cannot be read, so visibility cannot be decided."""
    pass


class QuoteService:
    """Price a shipment across tied-up and public carriers."""

    def __init__(
        self,
        repository: CarrierRepository,
        distance_service: DistanceService,
        collaborator_timeout: Optional[float] = None,
        request_timeout: Optional[float] = None,
        max_concurrency: Optional[int] = None,
    ):
        self.repository = repository
        self.distance_service = distance_service
        self.collaborator_timeout = (
            collaborator_timeout if collaborator_timeout is not None else settings.COLLABORATOR_TIMEOUT
        )
        self.request_timeout = (
            request_timeout if request_timeout is not None else settings.QUOTE_REQUEST_TIMEOUT
        )
        self.max_concurrency = (
            max_concurrency if max_concurrency is not None else settings.QUOTE_MAX_CONCURRENCY
        )
        if self.max_concurrency < 1:
            raise ValueError("max_concurrency must be at least 1")

    async def quote(
        self,
        request: QuoteRequest,
        context: Optional[QuoteContext] = None,
    ) -> QuoteResponse:
        """
        Quote a shipment.

        Raises:
            CustomerNotFoundError: customer does not exist
            CustomerLookupError: customer read failed or timed out
        """
        context = (context or QuoteContext()).bind(
            request.customer_id, request.from_pincode, request.to_pincode
        )
        log = context.log
        loop = asyncio.get_running_loop()
        deadline = loop.time() + self.request_timeout

        origin, destination = request.from_pincode, request.to_pincode
        lines = request.shipment_lines()
        log.info(
            f"Quote requested: {context.describe()} mode={request.mode_of_transport} "
            f"lines={len(lines)}"
        )

        async with context.timed("distance and collaborator reads"):
            estimate, account, tied_ups, carriers = await asyncio.gather(
                self.distance_service.resolve(origin, destination, log),
                self._load_customer(request.customer_id),
                self._read(
                    "tie-ups",
                    self.repository.get_tied_up_relationships(request.customer_id),
                    [],
                    log,
                ),
                self._read(
                    "serviceable carriers",
                    self.repository.find_serviceable_carriers(origin, destination),
                    [],
                    log,
                ),
                return_exceptions=True,
            )
        if isinstance(account, BaseException):
            log.error(f"Customer lookup failed: {account}")
            raise account

        route = QuoteRoute(origin, destination, estimate.estimated_days, estimate.distance)
        log.debug(f"Distance {estimate.distance}, {estimate.estimated_days} days ({estimate.source})")

        rate_cards: Dict[uuid.UUID, RateCard] = {}
        if carriers:
            async with context.timed("rate cards"):
                rate_cards = await self._read(
                    "rate cards",
                    self.repository.get_rate_cards([c.id for c in carriers]),
                    {},
                    log,
                )

        semaphore = asyncio.Semaphore(self.max_concurrency)
        tied_up_tasks = [
            asyncio.create_task(self._evaluate(
                semaphore, f"tie-up {tie_up.carrier_id}", context,
                self._quote_tied_up, tie_up, lines, route, log,
            ))
            for tie_up in tied_ups
        ]
        public_tasks = [
            asyncio.create_task(self._evaluate(
                semaphore, f"carrier {carrier.name}", context,
                self._quote_public, carrier, rate_cards.get(carrier.id), lines, route, log,
            ))
            for carrier in carriers
        ]

        tasks = tied_up_tasks + public_tasks
        done = set()
        if tasks:
            async with context.timed(f"pricing {len(tasks)} carriers"):
                done, pending = await asyncio.wait(tasks, timeout=max(deadline - loop.time(), 0))
            if pending:
                for task in pending:
                    task.cancel()
                await asyncio.gather(*pending, return_exceptions=True)
                log.warning(
                    f"Quote deadline of {self.request_timeout}s reached, "
                    f"{len(pending)} carrier(s) abandoned"
                )

        tied_up_quotes = self._collect(tied_up_tasks, done)
        public_quotes = self._collect(public_tasks, done)
        public_results = apply_visibility(tied_up_quotes, public_quotes, account.is_subscribed)

        log.info(
            f"Quote complete: {len(tied_up_quotes)} tied-up, "
            f"{len(public_results)}/{len(public_quotes)} public shown"
        )
        return QuoteResponse(tied_up_results=tied_up_quotes, public_results=public_results)

    # ============================================
    # COLLABORATOR READS
    # ============================================

    async def _load_customer(self, customer_id: uuid.UUID) -> CustomerAccount:
        details = {"customer_id": str(customer_id)}
        try:
            account = await asyncio.wait_for(
                self.repository.get_customer_subscription(customer_id),
                timeout=self.collaborator_timeout,
            )
        except asyncio.TimeoutError:
            raise CustomerLookupError("Customer lookup timed out", details)
        except Exception as e:
            raise CustomerLookupError("Customer lookup failed", {**details, "error": str(e)})

        if account is None:
            raise CustomerNotFoundError("Customer not found", details)
        return account

    async def _read(self, label: str, awaitable: Awaitable, default: Any, log) -> Any:
        """Bounded read that degrades to `default` on timeout or failure."""
        try:
            return await asyncio.wait_for(awaitable, timeout=self.collaborator_timeout)
        except asyncio.TimeoutError:
            log.error(f"Reading {label} timed out after {self.collaborator_timeout}s")
        except Exception as e:
            log.error(f"Reading {label} failed: {e}")
        return default

    # ============================================
    # CARRIER EVALUATION
    # ============================================

    async def _evaluate(
        self,
        semaphore: asyncio.Semaphore,
        label: str,
        context: QuoteContext,
        fn: Callable[..., Awaitable[Optional[CarrierQuote]]],
        *args,
    ) -> Optional[CarrierQuote]:
        async with semaphore:
            try:
                return await fn(*args)
            except asyncio.TimeoutError:
                context.log.warning(f"{label} excluded: read timed out ({context.describe()})")
            except Exception as e:
                context.log.error(
                    f"{label} excluded: {e} ({context.describe()})",
                    exc_info=True,
                )
        return None

    async def _quote_tied_up(
        self,
        tie_up: TiedUpRelationship,
        lines: List[ShipmentLine],
        route: QuoteRoute,
        log,
    ) -> Optional[CarrierQuote]:
        carrier = await asyncio.wait_for(
            self.repository.get_carrier_by_id(
                tie_up.carrier_id,
                pincodes={route.origin_pincode, route.destination_pincode},
            ),
            timeout=self.collaborator_timeout,
        )
        if carrier is None:
            log.info(f"Tied-up carrier {tie_up.carrier_id} not found")
            return None
        return quote_carrier(carrier, tie_up.rate_card, lines, route, log)

    async def _quote_public(
        self,
        carrier: Carrier,
        rate_card: Optional[RateCard],
        lines: List[ShipmentLine],
        route: QuoteRoute,
        log,
    ) -> Optional[CarrierQuote]:
        return quote_carrier(carrier, rate_card, lines, route, log)

    @staticmethod
    def _collect(tasks: List[asyncio.Task], done) -> List[CarrierQuote]:
        quotes = []
        for task in tasks:
            if task in done and not task.cancelled() and task.result() is not None:
                quotes.append(task.result())
        return quotes
