"""Instance catalog providers.

A catalog supplies the full list of instance types and a
requirement-filtered view. Filtering applies hard constraints only;
ranking is left to the scorer.
"""

import json
import logging
from pathlib import Path
from typing import Iterable, Protocol, Union

from pydantic import ValidationError

from .schema import ComputeRequirements, InstanceType, StorageType

logger = logging.getLogger(__name__)


class CatalogLoadError(Exception):
    """Raised when a catalog file cannot be read or validated."""


class CatalogProvider(Protocol):
    """Source of instance type records."""

    async def get_instance_types(self) -> list[InstanceType]:
        ...

    async def get_instance_types_by_requirements(
        self, requirements: ComputeRequirements
    ) -> list[InstanceType]:
        ...


def matches_requirements(instance: InstanceType, requirements: ComputeRequirements) -> bool:
    """Check an instance against the hard constraints in requirements.

    Network labels are preferences, not constraints, and are not checked.
    """
    if requirements.min_vcpus and instance.vcpus < requirements.min_vcpus:
        return False
    if requirements.max_vcpus and instance.vcpus > requirements.max_vcpus:
        return False

    memory_gib = instance.memory_gib
    if requirements.min_memory_gib and memory_gib < requirements.min_memory_gib:
        return False
    if requirements.max_memory_gib and memory_gib > requirements.max_memory_gib:
        return False

    if requirements.require_gpu and not instance.GpuInfo:
        return False
    if requirements.min_gpu_memory_gib and instance.GpuInfo:
        if instance.gpu_memory_gib < requirements.min_gpu_memory_gib:
            return False

    if requirements.architecture and requirements.architecture.value not in instance.architectures:
        return False

    if requirements.storage_type == StorageType.INSTANCE and not instance.has_instance_storage:
        return False
    if requirements.storage_type == StorageType.EBS and instance.has_instance_storage:
        return False

    return True


def filter_instances(
    instances: Iterable[InstanceType], requirements: ComputeRequirements
) -> list[InstanceType]:
    """Filter instances by requirements, keeping catalog order."""
    return [i for i in instances if matches_requirements(i, requirements)]


class StaticCatalog:
    """In-memory catalog over a fixed list of instance types."""

    def __init__(self, instance_types: Iterable[InstanceType]):
        self._instance_types = list(instance_types)

    @classmethod
    def sample(cls) -> "StaticCatalog":
        """Catalog built from the bundled sample data."""
        from .sample_data import SAMPLE_INSTANCE_TYPES

        return cls(InstanceType.model_validate(item) for item in SAMPLE_INSTANCE_TYPES)

    @classmethod
    def from_file(cls, path: Union[str, Path]) -> "StaticCatalog":
        """Load a catalog from a JSON file.

        Accepts either a list of instance records or a
        DescribeInstanceTypes-style object with an "InstanceTypes" key.
        """
        path = Path(path)
        try:
            with open(path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            raise CatalogLoadError(f"Cannot read catalog {path}: {e}") from e

        if isinstance(data, dict):
            data = data.get("InstanceTypes")
        if not isinstance(data, list):
            raise CatalogLoadError(
                f"Catalog {path} must be a list of instance types or contain 'InstanceTypes'"
            )

        try:
            instance_types = [InstanceType.model_validate(item) for item in data]
        except ValidationError as e:
            raise CatalogLoadError(f"Invalid instance type in {path}: {e}") from e

        logger.info("Loaded %d instance types from %s", len(instance_types), path)
        return cls(instance_types)

    async def get_instance_types(self) -> list[InstanceType]:
        return list(self._instance_types)

    async def get_instance_types_by_requirements(
        self, requirements: ComputeRequirements
    ) -> list[InstanceType]:
        return filter_instances(self._instance_types, requirements)
