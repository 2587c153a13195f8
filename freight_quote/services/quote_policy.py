"""
Best-price selection and visibility of public carrier quotes.

Tied-up quotes are always disclosed. Their cheapest total (l1) caps which
public quotes may be shown at all; customers without a subscription see only
the price of the remaining public quotes.
"""
import math
from typing import List, Sequence

from freight_quote.schemas.quote import CarrierQuote, HiddenQuote, PublicQuote


def cheapest_total(tied_up: Sequence[CarrierQuote]) -> float:
    """l1: lowest tied-up total, +inf when the customer has no tied-up quote."""
    return min((quote.total_charges for quote in tied_up), default=math.inf)


def mask_quote(quote: CarrierQuote) -> HiddenQuote:
    return HiddenQuote(total_charges=quote.total_charges)


def apply_visibility(
    tied_up: Sequence[CarrierQuote],
    public: Sequence[CarrierQuote],
    is_subscribed: bool,
) -> List[PublicQuote]:
    """
    Filter and mask public quotes against the tied-up minimum.

    A public quote dearer than l1 is dropped. Public quotes are never compared
    with each other.
    """
    l1 = cheapest_total(tied_up)
    visible: List[PublicQuote] = []
    for quote in public:
        if quote.total_charges > l1:
            continue
        visible.append(quote if is_subscribed else mask_quote(quote))
    return visible
