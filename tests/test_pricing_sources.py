"""Tests for the static pricing provider."""

import asyncio
import json

import pytest

from instance_matcher.pricing import extract_pricing_info, parse_spot_price
from instance_matcher.pricing_sources import (
    PricingLoadError,
    StaticPricingProvider,
    build_price_list_item,
)


class TestBuildPriceListItem:
    """Tests for build_price_list_item."""

    def test_pricing_api_shape(self):
        item = build_price_list_item("m5.large", {"on_demand": 0.096, "reserved_1yr": 0.069})

        assert item["product"]["attributes"]["instanceType"] == "m5.large"
        on_demand = item["terms"]["OnDemand"]["m5.large.on-demand"]
        assert on_demand["priceDimensions"]["dimension-1"]["pricePerUnit"]["USD"] == "0.096"
        reserved = item["terms"]["Reserved"]["m5.large.reserved-1yr"]
        assert reserved["termAttributes"]["LeaseContractLength"] == "1yr"
        assert "m5.large.reserved-3yr" not in item["terms"]["Reserved"]

    def test_no_rates_no_terms(self):
        assert build_price_list_item("x", {})["terms"] == {}


class TestStaticPricingProvider:
    """Tests for StaticPricingProvider."""

    def test_sample_rates_round_trip_through_fusion(self):
        provider = StaticPricingProvider.sample()

        item = asyncio.run(provider.get_pricing("r5.2xlarge"))
        pricing = extract_pricing_info(item)

        assert pricing.on_demand == pytest.approx(0.504)
        assert pricing.reserved_1yr == pytest.approx(0.362)
        assert pricing.reserved_3yr == pytest.approx(0.234)

    def test_unknown_instance(self):
        assert asyncio.run(StaticPricingProvider.sample().get_pricing("zz.nothing")) is None

    def test_spot_quotes(self):
        provider = StaticPricingProvider.sample()

        quotes = asyncio.run(provider.get_spot_prices(["m5.large", "zz.nothing"]))

        assert [q.InstanceType for q in quotes] == ["m5.large"]
        assert quotes[0].AvailabilityZone == "us-east-1a"
        assert parse_spot_price(quotes) == pytest.approx(0.028)

    def test_no_spot_rate_no_quote(self):
        provider = StaticPricingProvider({"t3.micro": {"on_demand": 0.0104}})

        assert asyncio.run(provider.get_spot_prices(["t3.micro"])) == []

    def test_from_file(self, tmp_path):
        path = tmp_path / "rates.json"
        path.write_text(json.dumps({"t3.micro": {"on_demand": "0.0104", "spot_current": 0.0031, "note": "x"}}))

        provider = StaticPricingProvider.from_file(path)
        pricing = extract_pricing_info(asyncio.run(provider.get_pricing("t3.micro")))

        assert pricing.on_demand == pytest.approx(0.0104)

    @pytest.mark.parametrize("content,match", [
        ("[1, 2]", "keyed by instance type"),
        ('{"t3.micro": 0.01}', "must be an object"),
        ('{"t3.micro": {"on_demand": "cheap"}}', "Invalid rate"),
        ("{oops", "Cannot read"),
    ])
    def test_from_file_errors(self, tmp_path, content, match):
        path = tmp_path / "rates.json"
        path.write_text(content)

        with pytest.raises(PricingLoadError, match=match):
            StaticPricingProvider.from_file(path)
