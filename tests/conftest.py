"""Shared fixtures for instance matcher tests."""

import pytest

from instance_matcher.catalog import StaticCatalog
from instance_matcher.config import reset_config
from instance_matcher.matcher import InstanceMatcher
from instance_matcher.pricing_sources import StaticPricingProvider
from instance_matcher.schema import InstanceType


def make_instance(
    name: str = "t.test",
    vcpus: int = 4,
    memory_gib: float = 16,
    current_generation: bool = True,
    architecture: str = "x86_64",
    network: str = "Up to 10 Gigabit",
    gpu: dict = None,
    storage_gb: int = 0,
) -> InstanceType:
    """Build an instance type record in DescribeInstanceTypes shape."""
    data = {
        "InstanceType": name,
        "CurrentGeneration": current_generation,
        "ProcessorInfo": {"SupportedArchitectures": [architecture]},
        "VCpuInfo": {"DefaultVCpus": vcpus},
        "MemoryInfo": {"SizeInMiB": int(memory_gib * 1024)},
        "NetworkInfo": {"NetworkPerformance": network},
    }
    if gpu:
        data["GpuInfo"] = gpu
    if storage_gb:
        data["InstanceStorageInfo"] = {
            "TotalSizeInGB": storage_gb,
            "Disks": [{"SizeInGB": storage_gb, "Count": 1, "Type": "ssd"}],
        }
    return InstanceType.model_validate(data)


class FailingPricingProvider:
    """Pricing provider that fails for selected instance types."""

    def __init__(self, inner, failing: set[str]):
        self.inner = inner
        self.failing = failing
        self.calls: list[str] = []

    async def get_pricing(self, instance_type: str):
        self.calls.append(instance_type)
        if instance_type in self.failing:
            raise RuntimeError(f"pricing backend down for {instance_type}")
        return await self.inner.get_pricing(instance_type)

    async def get_spot_prices(self, instance_types: list[str]):
        return await self.inner.get_spot_prices(instance_types)


class RecordingPricingProvider(StaticPricingProvider):
    """Sample pricing provider that records spot lookups."""

    def __init__(self, rates):
        super().__init__(rates)
        self.spot_calls: list[list[str]] = []

    async def get_spot_prices(self, instance_types: list[str]):
        self.spot_calls.append(list(instance_types))
        return await super().get_spot_prices(instance_types)


@pytest.fixture(autouse=True)
def clean_config():
    """Each test starts from default configuration."""
    reset_config()
    yield
    reset_config()


@pytest.fixture
def sample_catalog() -> StaticCatalog:
    return StaticCatalog.sample()


@pytest.fixture
def sample_pricing() -> StaticPricingProvider:
    return StaticPricingProvider.sample()


@pytest.fixture
def matcher(sample_catalog, sample_pricing) -> InstanceMatcher:
    """Matcher over the bundled sample catalog and rates."""
    return InstanceMatcher(sample_catalog, sample_pricing)
