"""Tests for pricing fusion.

Price-list records follow the AWS Pricing API shape; anything that
cannot be read must come back as 0 rather than raise.
"""

import math

import pytest

from instance_matcher.pricing import ZERO_PRICING, extract_pricing_info, parse_spot_price
from instance_matcher.pricing_sources import build_price_list_item
from instance_matcher.schema import SpotPriceQuote


def _term(usd, lease=None):
    term = {"priceDimensions": {"d1": {"unit": "Hrs", "pricePerUnit": {"USD": usd}}}}
    if lease:
        term["termAttributes"] = {"LeaseContractLength": lease}
    return term


def _quote(price: str, instance_type: str = "m5.large") -> SpotPriceQuote:
    return SpotPriceQuote(InstanceType=instance_type, SpotPrice=price)


class TestExtractPricingInfo:
    """Tests for extract_pricing_info."""

    def test_full_record(self):
        """All tiers are read from a complete record."""
        item = build_price_list_item("m5.large", {
            "on_demand": 0.096,
            "reserved_1yr": 0.069,
            "reserved_3yr": 0.045,
        })

        pricing = extract_pricing_info(item, 0.028)

        assert pricing.on_demand == pytest.approx(0.096)
        assert pricing.reserved_1yr == pytest.approx(0.069)
        assert pricing.reserved_3yr == pytest.approx(0.045)
        assert pricing.spot_current == pytest.approx(0.028)

    def test_none_record_is_all_zero(self):
        assert extract_pricing_info(None) == ZERO_PRICING

    def test_no_terms_keeps_spot(self):
        """A record without terms still reports the spot price."""
        pricing = extract_pricing_info({"product": {}}, 0.05)

        assert pricing.on_demand == 0
        assert pricing.reserved_1yr == 0
        assert pricing.reserved_3yr == 0
        assert pricing.spot_current == pytest.approx(0.05)

    def test_empty_terms(self):
        assert extract_pricing_info({"terms": {}}) == ZERO_PRICING

    def test_on_demand_uses_first_term(self):
        item = {"terms": {"OnDemand": {
            "a": _term("0.5"),
            "b": _term("0.9"),
        }}}

        assert extract_pricing_info(item).on_demand == pytest.approx(0.5)

    def test_reserved_other_lease_ignored(self):
        """Only 1yr and 3yr reserved terms are recognized."""
        item = {"terms": {"Reserved": {
            "a": _term("0.07", "1yr"),
            "b": _term("0.02", "5yr"),
            "c": _term("0.04", "3yr"),
        }}}

        pricing = extract_pricing_info(item)

        assert pricing.on_demand == 0
        assert pricing.reserved_1yr == pytest.approx(0.07)
        assert pricing.reserved_3yr == pytest.approx(0.04)

    def test_reserved_without_lease_attribute(self):
        item = {"terms": {"Reserved": {"a": _term("0.07")}}}

        pricing = extract_pricing_info(item)

        assert pricing.reserved_1yr == 0
        assert pricing.reserved_3yr == 0

    @pytest.mark.parametrize("usd", ["not-a-number", "", None, "-1.0", "nan"])
    def test_unparseable_rate_is_zero(self, usd):
        item = {"terms": {"OnDemand": {"a": _term(usd)}}}

        assert extract_pricing_info(item).on_demand == 0

    @pytest.mark.parametrize("item", [
        {"terms": {"OnDemand": {"a": {}}}},
        {"terms": {"OnDemand": {"a": {"priceDimensions": {}}}}},
        {"terms": {"OnDemand": {"a": {"priceDimensions": {"d": {"pricePerUnit": "0.1"}}}}}},
        {"terms": {"OnDemand": "garbage", "Reserved": ["also", "garbage"]}},
        {"terms": "garbage"},
        "garbage",
    ])
    def test_malformed_structure_never_raises(self, item):
        pricing = extract_pricing_info(item)

        assert pricing.on_demand == 0
        assert pricing.reserved_1yr == 0
        assert pricing.reserved_3yr == 0

    def test_negative_spot_is_zero(self):
        assert extract_pricing_info(None, -0.5).spot_current == 0

    def test_rates_are_finite_and_non_negative(self):
        item = build_price_list_item("x", {"on_demand": 1.5, "reserved_3yr": 0.5})

        pricing = extract_pricing_info(item, 0.2)

        for rate in (pricing.on_demand, pricing.reserved_1yr, pricing.reserved_3yr, pricing.spot_current):
            assert rate >= 0
            assert math.isfinite(rate)


class TestParseSpotPrice:
    """Tests for parse_spot_price."""

    def test_first_quote_wins(self):
        assert parse_spot_price([_quote("0.031"), _quote("0.040")]) == pytest.approx(0.031)

    def test_no_quotes(self):
        assert parse_spot_price([]) == 0

    def test_unparseable_quote(self):
        assert parse_spot_price([_quote("n/a")]) == 0
