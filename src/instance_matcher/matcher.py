"""Instance Matcher - orchestrates catalog lookup, pricing and scoring.

Pipeline:
1. Ask the catalog for candidates that meet the hard constraints
2. Fetch pricing for every candidate concurrently
3. Fuse the raw pricing into PricingInfo
4. Score each candidate on performance, cost and efficiency
5. Sort by blended score (stable) and truncate
"""

import asyncio
import logging
from typing import Optional

from .catalog import CatalogProvider
from .pricing import ZERO_PRICING, extract_pricing_info, parse_spot_price
from .pricing_sources import PricingProvider
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

logger = logging.getLogger(__name__)


class InstanceMatcher:
    """Finds and ranks instance types for a set of compute requirements.

    Principles:
    - Catalog failures propagate to the caller
    - Pricing failures never exclude a candidate; they degrade to zero pricing
    - No candidates is an empty result, not an error
    """

    def __init__(
        self,
        catalog: CatalogProvider,
        pricing: PricingProvider,
        scorer: Optional[InstanceScorer] = None,
        default_weights: Optional[WeightFactors] = None,
    ):
        self.catalog = catalog
        self.pricing = pricing
        self.default_weights = default_weights or WeightFactors()
        self.scorer = scorer or InstanceScorer(self.default_weights)

    async def match_instances(
        self,
        requirements: ComputeRequirements,
        options: Optional[MatchingOptions] = None,
    ) -> list[InstanceMatch]:
        """Find and rank instances that meet the requirements.

        Args:
            requirements: Compute requirements to match
            options: Result count, spot lookup and blend weights. Weights
                left unset fall back to the matcher's default_weights

        Returns:
            Matches sorted by score, highest first, at most max_results
        """
        options = self._resolve_options(options)

        candidates = await self.catalog.get_instance_types_by_requirements(requirements)
        if not candidates:
            logger.info("No candidate instance types for requirements")
            return []

        priced = await self._add_pricing(candidates, options.include_spot_pricing)

        matches = [
            self.scorer.score(instance, pricing, requirements, options.weight_factors)
            for instance, pricing in priced
        ]

        # sorted() is stable, so ties keep catalog order
        matches = sorted(matches, key=lambda m: m.match_score, reverse=True)
        return matches[:options.max_results]

    async def match_for_workload(
        self,
        workload: ResearchWorkload,
        options: Optional[MatchingOptions] = None,
    ) -> list[InstanceMatch]:
        """Match instances using a preset workload's requirements."""
        return await self.match_instances(workload.requirements, options)

    async def get_best_match(
        self,
        requirements: ComputeRequirements,
        options: Optional[MatchingOptions] = None,
    ) -> Optional[InstanceMatch]:
        """Return the top match, or None when nothing qualifies."""
        options = self._resolve_options(options)
        matches = await self.match_instances(
            requirements,
            options.model_copy(update={"max_results": 1}),
        )
        return matches[0] if matches else None

    async def compare_instances(
        self,
        instance_types: list[str],
        requirements: ComputeRequirements,
    ) -> list[InstanceMatch]:
        """Score named instance types against requirements.

        Instances are resolved from the full, unfiltered catalog and
        returned in catalog order without sorting by score.
        """
        if not instance_types:
            return []

        wanted = set(instance_types)
        all_instances = await self.catalog.get_instance_types()
        targets = [i for i in all_instances if i.InstanceType in wanted]

        if not targets:
            logger.info("None of %s found in catalog", sorted(wanted))
            return []

        priced = await self._add_pricing(targets, include_spot_pricing=True)
        return [
            self.scorer.score(instance, pricing, requirements, self.default_weights)
            for instance, pricing in priced
        ]

    def _resolve_options(self, options: Optional[MatchingOptions]) -> MatchingOptions:
        """Fill in the matcher's default weights where the caller left them unset."""
        if options is None:
            return MatchingOptions(weight_factors=self.default_weights)
        if "weight_factors" not in options.model_fields_set:
            return options.model_copy(update={"weight_factors": self.default_weights})
        return options

    async def _add_pricing(
        self,
        instances: list[InstanceType],
        include_spot_pricing: bool = True,
    ) -> list[tuple[InstanceType, PricingInfo]]:
        """Fetch pricing for all instances concurrently.

        Result order matches input order.
        """
        logger.debug("Fetching pricing for %d instance types", len(instances))
        pricing = await asyncio.gather(
            *(self._fetch_pricing(instance, include_spot_pricing) for instance in instances)
        )
        return list(zip(instances, pricing))

    async def _fetch_pricing(self, instance: InstanceType, include_spot_pricing: bool) -> PricingInfo:
        """Fetch and fuse pricing for one instance; failures give zero pricing."""
        instance_type = instance.InstanceType
        try:
            if include_spot_pricing:
                price_list_item, spot_quotes = await asyncio.gather(
                    self.pricing.get_pricing(instance_type),
                    self.pricing.get_spot_prices([instance_type]),
                )
            else:
                price_list_item = await self.pricing.get_pricing(instance_type)
                spot_quotes = []
            return extract_pricing_info(price_list_item, parse_spot_price(spot_quotes))
        except Exception as e:
            logger.warning("Pricing unavailable for %s, using zero pricing: %s", instance_type, e)
            return ZERO_PRICING
