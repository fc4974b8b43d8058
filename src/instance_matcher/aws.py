"""Live AWS catalog and pricing providers.

Wraps the EC2 (DescribeInstanceTypes, DescribeSpotPriceHistory) and
Pricing (GetProducts) APIs. boto3 is blocking, so every call runs in a
worker thread to keep the matcher's fan-out concurrent.
"""

import asyncio
import json
import logging
import threading
from datetime import datetime, timedelta, timezone
from typing import Any, Optional

import boto3
from botocore.exceptions import BotoCoreError, ClientError
from pydantic import ValidationError

from .catalog import filter_instances
from .config import AwsSettings
from .schema import ComputeRequirements, InstanceType, SpotPriceQuote

logger = logging.getLogger(__name__)

SPOT_PRODUCT_DESCRIPTION = "Linux/UNIX"
SPOT_LOOKBACK = timedelta(hours=24)

# Pricing API filters on location names, not region codes
REGION_LOCATIONS = {
    "us-east-1": "US East (N. Virginia)",
    "us-east-2": "US East (Ohio)",
    "us-west-1": "US West (N. California)",
    "us-west-2": "US West (Oregon)",
    "ca-central-1": "Canada (Central)",
    "eu-west-1": "EU (Ireland)",
    "eu-west-2": "EU (London)",
    "eu-central-1": "EU (Frankfurt)",
    "ap-south-1": "Asia Pacific (Mumbai)",
    "ap-southeast-1": "Asia Pacific (Singapore)",
    "ap-southeast-2": "Asia Pacific (Sydney)",
    "ap-northeast-1": "Asia Pacific (Tokyo)",
}
DEFAULT_LOCATION = REGION_LOCATIONS["us-east-1"]


class AWSServiceError(Exception):
    """Raised when an AWS API call fails."""

    def __init__(self, message: str, code: Optional[str] = None, service: Optional[str] = None):
        super().__init__(message)
        self.code = code
        self.service = service


def region_to_location(region: str) -> str:
    """Map a region code to its Pricing API location name."""
    return REGION_LOCATIONS.get(region, DEFAULT_LOCATION)


class AWSService:
    """Catalog and pricing provider backed by the AWS APIs.

    Instance types and per-type price-list records are cached for the
    lifetime of the service.
    """

    def __init__(
        self,
        settings: Optional[AwsSettings] = None,
        ec2_client: Any = None,
        pricing_client: Any = None,
    ):
        self.settings = settings or AwsSettings()
        self._ec2 = ec2_client
        self._pricing = pricing_client
        self._instance_types_cache: Optional[list[InstanceType]] = None
        self._pricing_cache: dict[str, Optional[dict[str, Any]]] = {}

        # Guards lazy client creation across to_thread workers
        self._lock = threading.RLock()

    @property
    def ec2(self) -> Any:
        if self._ec2 is None:
            with self._lock:
                if self._ec2 is None:
                    self._ec2 = boto3.client(
                        "ec2",
                        region_name=self.settings.region,
                        endpoint_url=self.settings.endpoint_url,
                    )
        return self._ec2

    @property
    def pricing(self) -> Any:
        if self._pricing is None:
            with self._lock:
                if self._pricing is None:
                    self._pricing = boto3.client(
                        "pricing",
                        region_name=self.settings.pricing_region,
                        endpoint_url=self.settings.endpoint_url,
                    )
        return self._pricing

    # -------------------------------------------------------------------------
    # Catalog
    # -------------------------------------------------------------------------

    async def get_instance_types(self) -> list[InstanceType]:
        """Fetch all instance types, cached after the first call."""
        if self._instance_types_cache is not None:
            return self._instance_types_cache

        try:
            raw_types = await asyncio.to_thread(self._describe_instance_types)
        except (BotoCoreError, ClientError) as e:
            raise AWSServiceError(
                f"Failed to fetch instance types: {e}",
                code="INSTANCE_TYPES_FETCH_ERROR",
                service="EC2",
            ) from e

        instance_types = []
        for raw in raw_types:
            try:
                instance_types.append(InstanceType.model_validate(raw))
            except ValidationError as e:
                logger.warning("Skipping instance type %s: %s", raw.get("InstanceType"), e)

        logger.info("Fetched %d instance types from EC2", len(instance_types))
        self._instance_types_cache = instance_types
        return instance_types

    async def get_instance_types_by_requirements(
        self, requirements: ComputeRequirements
    ) -> list[InstanceType]:
        return filter_instances(await self.get_instance_types(), requirements)

    def _describe_instance_types(self) -> list[dict[str, Any]]:
        params: dict[str, Any] = {}
        if self.settings.current_generation_only:
            params["Filters"] = [{"Name": "current-generation", "Values": ["true"]}]

        paginator = self.ec2.get_paginator("describe_instance_types")
        return [
            item
            for page in paginator.paginate(**params)
            for item in page.get("InstanceTypes", [])
        ]

    # -------------------------------------------------------------------------
    # Pricing
    # -------------------------------------------------------------------------

    async def get_spot_prices(self, instance_types: list[str]) -> list[SpotPriceQuote]:
        """Fetch spot price history for the last 24 hours."""
        try:
            rows = await asyncio.to_thread(self._describe_spot_prices, instance_types)
        except (BotoCoreError, ClientError) as e:
            raise AWSServiceError(
                f"Failed to fetch spot prices: {e}",
                code="SPOT_PRICES_FETCH_ERROR",
                service="EC2",
            ) from e

        quotes = []
        for row in rows:
            timestamp = row.get("Timestamp")
            if isinstance(timestamp, datetime):
                row = {**row, "Timestamp": timestamp.isoformat()}
            quotes.append(SpotPriceQuote.model_validate(row))
        return quotes

    def _describe_spot_prices(self, instance_types: list[str]) -> list[dict[str, Any]]:
        response = self.ec2.describe_spot_price_history(
            InstanceTypes=instance_types,
            ProductDescriptions=[SPOT_PRODUCT_DESCRIPTION],
            StartTime=datetime.now(timezone.utc) - SPOT_LOOKBACK,
            MaxResults=100,
        )
        return response.get("SpotPriceHistory", [])

    async def get_pricing(self, instance_type: str) -> Optional[dict[str, Any]]:
        """Fetch the price-list record for one instance type.

        Returns None when the Pricing API has no usable record.
        """
        cache_key = f"{instance_type}-{self.settings.region}"
        if cache_key in self._pricing_cache:
            logger.debug("Pricing cache hit for %s", cache_key)
            return self._pricing_cache[cache_key]

        try:
            price_list = await asyncio.to_thread(self._get_products, instance_type)
        except (BotoCoreError, ClientError) as e:
            raise AWSServiceError(
                f"Failed to fetch pricing for {instance_type}: {e}",
                code="PRICING_FETCH_ERROR",
                service="Pricing",
            ) from e

        if not price_list:
            return None

        raw = price_list[0]
        if isinstance(raw, dict):
            price_data = raw
        else:
            try:
                price_data = json.loads(str(raw))
            except json.JSONDecodeError as e:
                logger.warning("Failed to parse pricing JSON for %s: %s", instance_type, e)
                return None

        self._pricing_cache[cache_key] = price_data
        return price_data

    def _get_products(self, instance_type: str) -> list[Any]:
        filters = [
            ("instanceType", instance_type),
            ("location", region_to_location(self.settings.region)),
            ("tenancy", "Shared"),
            ("operatingSystem", self.settings.operating_system),
            ("preInstalledSw", "NA"),
            ("capacitystatus", "Used"),
        ]
        response = self.pricing.get_products(
            ServiceCode="AmazonEC2",
            Filters=[
                {"Type": "TERM_MATCH", "Field": field, "Value": value}
                for field, value in filters
            ],
            MaxResults=10,
        )
        return response.get("PriceList", [])
