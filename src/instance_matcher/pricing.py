"""Pricing Fusion.

Turns a raw Pricing API price-list record and an optional spot quote into
a normalized PricingInfo. Missing or malformed structure never raises;
the affected tier is reported as 0 (unknown).
"""

import logging
from typing import Any, Iterable, Mapping, Optional

from .schema import PricingInfo, SpotPriceQuote

logger = logging.getLogger(__name__)

LEASE_1YR = "1yr"
LEASE_3YR = "3yr"

ZERO_PRICING = PricingInfo()


def _parse_rate(value: Any) -> Optional[float]:
    """Parse a decimal rate string. Returns None when absent or invalid."""
    if value is None:
        return None
    try:
        rate = float(value)
    except (TypeError, ValueError):
        return None
    if rate != rate or rate < 0:  # NaN or negative
        return None
    return rate


def _first_value(mapping: Any) -> Optional[Any]:
    """Return the first value of a mapping, or None if it has none."""
    if not isinstance(mapping, Mapping):
        return None
    for value in mapping.values():
        return value
    return None


def _term_rate(term: Any) -> Optional[float]:
    """Read the USD rate from a term's first price dimension."""
    if not isinstance(term, Mapping):
        return None
    dimension = _first_value(term.get("priceDimensions"))
    if not isinstance(dimension, Mapping):
        return None
    price_per_unit = dimension.get("pricePerUnit")
    if not isinstance(price_per_unit, Mapping):
        return None
    return _parse_rate(price_per_unit.get("USD"))


def _lease_length(term: Mapping) -> Optional[str]:
    attributes = term.get("termAttributes")
    if not isinstance(attributes, Mapping):
        return None
    return attributes.get("LeaseContractLength")


def extract_pricing_info(
    price_list_item: Optional[Mapping[str, Any]],
    spot_price: float = 0.0,
) -> PricingInfo:
    """Extract on-demand, reserved and spot rates from a price-list record.

    Args:
        price_list_item: Raw Pricing API record (may be None or partial)
        spot_price: Current spot rate, 0 when not requested or unavailable

    Returns:
        PricingInfo where every tier that could not be read is 0
    """
    spot_current = spot_price if spot_price and spot_price > 0 else 0.0

    terms = price_list_item.get("terms") if isinstance(price_list_item, Mapping) else None
    if not isinstance(terms, Mapping) or not terms:
        return PricingInfo(spot_current=spot_current)

    on_demand = _term_rate(_first_value(terms.get("OnDemand")))

    reserved = {LEASE_1YR: None, LEASE_3YR: None}
    reserved_terms = terms.get("Reserved")
    if isinstance(reserved_terms, Mapping):
        for term in reserved_terms.values():
            rate = _term_rate(term)
            if rate is None:
                continue
            lease = _lease_length(term)
            # Later terms of the same length overwrite earlier ones
            if lease in reserved:
                reserved[lease] = rate

    return PricingInfo(
        on_demand=on_demand or 0.0,
        reserved_1yr=reserved[LEASE_1YR] or 0.0,
        reserved_3yr=reserved[LEASE_3YR] or 0.0,
        spot_current=spot_current,
    )


def parse_spot_price(quotes: Iterable[SpotPriceQuote]) -> float:
    """Parse the first spot quote's price. Absent or invalid quotes give 0."""
    for quote in quotes:
        rate = _parse_rate(quote.SpotPrice)
        if rate is None:
            logger.debug("Ignoring unparseable spot price %r for %s", quote.SpotPrice, quote.InstanceType)
            return 0.0
        return rate
    return 0.0
