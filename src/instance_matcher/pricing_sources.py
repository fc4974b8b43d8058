"""Pricing providers.

A pricing provider returns raw price-list records in the AWS Pricing API
shape and current spot quotes. The engine only reads them through
pricing.extract_pricing_info.
"""

import json
import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Mapping, Optional, Protocol, Union

from .schema import SpotPriceQuote

logger = logging.getLogger(__name__)

SPOT_AVAILABILITY_ZONE = "us-east-1a"
SPOT_PRODUCT_DESCRIPTION = "Linux/UNIX"
RATE_KEYS = ("on_demand", "reserved_1yr", "reserved_3yr", "spot_current")


class PricingLoadError(Exception):
    """Raised when a pricing file cannot be read or validated."""


class PricingProvider(Protocol):
    """Source of price-list records and spot quotes."""

    async def get_pricing(self, instance_type: str) -> Optional[dict[str, Any]]:
        ...

    async def get_spot_prices(self, instance_types: list[str]) -> list[SpotPriceQuote]:
        ...


def _term(rate: float, **term_attributes: str) -> dict[str, Any]:
    term: dict[str, Any] = {
        "priceDimensions": {
            "dimension-1": {
                "unit": "Hrs",
                "pricePerUnit": {"USD": str(rate)},
            },
        },
    }
    if term_attributes:
        term["termAttributes"] = term_attributes
    return term


def build_price_list_item(instance_type: str, rates: Mapping[str, float]) -> dict[str, Any]:
    """Build a Pricing API shaped record from a table of hourly rates."""
    terms: dict[str, Any] = {}
    if rates.get("on_demand"):
        terms["OnDemand"] = {f"{instance_type}.on-demand": _term(rates["on_demand"])}

    reserved = {}
    for lease, key in (("1yr", "reserved_1yr"), ("3yr", "reserved_3yr")):
        if rates.get(key):
            reserved[f"{instance_type}.reserved-{lease}"] = _term(
                rates[key],
                LeaseContractLength=lease,
                OfferingClass="standard",
                PurchaseOption="No Upfront",
            )
    if reserved:
        terms["Reserved"] = reserved

    return {
        "product": {
            "productFamily": "Compute Instance",
            "attributes": {
                "instanceType": instance_type,
                "operatingSystem": "Linux",
            },
        },
        "terms": terms,
    }


class StaticPricingProvider:
    """Pricing provider backed by a fixed table of hourly rates."""

    def __init__(self, rates: Mapping[str, Mapping[str, float]]):
        self._rates = {k: dict(v) for k, v in rates.items()}

    @classmethod
    def sample(cls) -> "StaticPricingProvider":
        """Provider built from the bundled sample rates."""
        from .sample_data import SAMPLE_PRICING

        return cls(SAMPLE_PRICING)

    @classmethod
    def from_file(cls, path: Union[str, Path]) -> "StaticPricingProvider":
        """Load rates from a JSON object keyed by instance type."""
        path = Path(path)
        try:
            with open(path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            raise PricingLoadError(f"Cannot read pricing file {path}: {e}") from e

        if not isinstance(data, dict):
            raise PricingLoadError(f"Pricing file {path} must be an object keyed by instance type")

        rates = {}
        for instance_type, entry in data.items():
            if not isinstance(entry, dict):
                raise PricingLoadError(f"Pricing entry for {instance_type} must be an object")
            try:
                rates[instance_type] = {k: float(entry[k]) for k in RATE_KEYS if k in entry}
            except (TypeError, ValueError) as e:
                raise PricingLoadError(f"Invalid rate for {instance_type} in {path}: {e}") from e

        logger.info("Loaded rates for %d instance types from %s", len(rates), path)
        return cls(rates)

    async def get_pricing(self, instance_type: str) -> Optional[dict[str, Any]]:
        rates = self._rates.get(instance_type)
        if not rates:
            return None
        return build_price_list_item(instance_type, rates)

    async def get_spot_prices(self, instance_types: list[str]) -> list[SpotPriceQuote]:
        timestamp = datetime.now(timezone.utc).isoformat()
        quotes = []
        for instance_type in instance_types:
            spot = self._rates.get(instance_type, {}).get("spot_current")
            if not spot:
                continue
            quotes.append(SpotPriceQuote(
                InstanceType=instance_type,
                SpotPrice=str(spot),
                AvailabilityZone=SPOT_AVAILABILITY_ZONE,
                ProductDescription=SPOT_PRODUCT_DESCRIPTION,
                Timestamp=timestamp,
            ))
        return quotes
