"""Instance Matching Engine.

Recommends EC2 instance types by scoring catalog specifications and
multi-tier pricing against compute requirements.
"""

from .catalog import CatalogLoadError, StaticCatalog
from .matcher import InstanceMatcher
from .pricing_sources import StaticPricingProvider
from .schema import (
    ComputeRequirements,
    InstanceMatch,
    InstanceType,
    MatchingOptions,
    PricingInfo,
    ResearchWorkload,
    WeightFactors,
)
from .scorer import InstanceScorer

__version__ = "1.0.0"

__all__ = [
    "CatalogLoadError",
    "ComputeRequirements",
    "InstanceMatch",
    "InstanceMatcher",
    "InstanceScorer",
    "InstanceType",
    "MatchingOptions",
    "PricingInfo",
    "ResearchWorkload",
    "StaticCatalog",
    "StaticPricingProvider",
    "WeightFactors",
]
