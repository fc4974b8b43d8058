"""Scorer - scores candidate instance types against compute requirements.

Three independent axes, each 0-100 with a base of 50:
performance (how well specs exceed the minimums), cost (price per unit
of capacity) and efficiency (right-sizing vs over-provisioning).
"""

import math
from typing import Optional

from .schema import (
    ComputeRequirements,
    InstanceMatch,
    InstanceType,
    MatchPricing,
    PricingInfo,
    ScoreBreakdown,
    WeightFactors,
)

BASE_SCORE = 50


def round_half_up(value: float) -> int:
    """Round to the nearest integer, halves away from zero for positives."""
    return int(math.floor(value + 0.5))


def _clamp(score: float, low: float = 0, high: float = 100) -> float:
    return max(low, min(score, high))


class InstanceScorer:
    """Scores instance types along performance, cost and efficiency.

    Scoring principles:
    - Each axis starts at 50 and applies independent additive rules
    - Every rule that fires appends one human-readable reason
    - Unknown pricing is neutral, never favorable
    - Nothing here rejects a candidate; filtering happens upstream
    """

    # (min ratio, bonus, label) checked in order, first match wins
    CAPACITY_TIERS = [
        (2.0, 20, "Excellent"),
        (1.5, 15, "Good"),
        (1.0, 10, "Adequate"),
    ]

    # (max cost per vCPU, bonus, label)
    COST_PER_VCPU_TIERS = [
        (0.05, 25, "Excellent"),
        (0.10, 15, "Good"),
        (0.20, 5, "Moderate"),
    ]

    # (max cost per GiB, bonus, label)
    COST_PER_GIB_TIERS = [
        (0.02, 15, "Excellent"),
        (0.05, 10, "Good"),
    ]

    GPU_BONUS = 15
    GPU_MEMORY_BONUS = 10
    GPU_MEMORY_RATIO = 1.5
    NETWORK_BONUS = 5
    CURRENT_GENERATION_BONUS = 5
    SPOT_BONUS = 10
    SPOT_DISCOUNT_THRESHOLD = 0.5
    BALANCED_RATIO_BONUS = 5
    BALANCED_RATIO_RANGE = (4, 8)  # GiB per vCPU

    def __init__(self, weights: Optional[WeightFactors] = None):
        """Initialize scorer with optional default blend weights."""
        self.weights = weights or WeightFactors()

    def score(
        self,
        instance: InstanceType,
        pricing: PricingInfo,
        requirements: ComputeRequirements,
        weights: Optional[WeightFactors] = None,
    ) -> InstanceMatch:
        """Score a single candidate and build its match.

        Reasons are collected in a single list in the order
        performance, cost, efficiency.
        """
        weights = weights or self.weights
        reasons: list[str] = []

        performance = self.score_performance(instance, requirements, reasons)
        cost = self.score_cost(instance, pricing, reasons)
        efficiency = self.score_efficiency(instance, requirements, reasons)

        blended = (
            performance * weights.performance
            + cost * weights.cost
            + efficiency * weights.efficiency
        )

        return InstanceMatch(
            instance=instance,
            pricing=MatchPricing(
                on_demand=pricing.on_demand,
                reserved_1yr=pricing.reserved_1yr,
                reserved_3yr=pricing.reserved_3yr,
                spot_current=pricing.spot_current,
                spot_average_24h=pricing.spot_current,
            ),
            match_score=int(_clamp(round_half_up(blended))),
            match_reasons=reasons,
            breakdown=ScoreBreakdown(
                performance=performance,
                cost=cost,
                efficiency=efficiency,
                weights=weights,
            ),
        )

    def score_performance(
        self,
        instance: InstanceType,
        requirements: ComputeRequirements,
        reasons: list[str],
    ) -> int:
        """Score how well the instance's capacity exceeds the minimums."""
        score = BASE_SCORE
        memory_gib = instance.memory_gib

        if requirements.min_vcpus:
            cpu_ratio = instance.vcpus / requirements.min_vcpus
            tier = self._capacity_tier(cpu_ratio)
            if tier:
                bonus, label = tier
                score += bonus
                reasons.append(f"{label} CPU performance ({instance.vcpus} vCPUs)")

        if requirements.min_memory_gib:
            memory_ratio = memory_gib / requirements.min_memory_gib
            tier = self._capacity_tier(memory_ratio)
            if tier:
                bonus, label = tier
                score += bonus
                reasons.append(f"{label} memory capacity ({round_half_up(memory_gib)} GiB)")

        if requirements.require_gpu and instance.GpuInfo:
            gpu_memory_gib = instance.gpu_memory_gib
            score += self.GPU_BONUS
            reasons.append(
                f"GPU acceleration available ({instance.gpu_name or 'GPU'}, "
                f"{round_half_up(gpu_memory_gib)} GiB VRAM)"
            )
            if requirements.min_gpu_memory_gib:
                gpu_memory_ratio = gpu_memory_gib / requirements.min_gpu_memory_gib
                if gpu_memory_ratio >= self.GPU_MEMORY_RATIO:
                    score += self.GPU_MEMORY_BONUS
                    reasons.append("GPU memory exceeds requirements")

        if requirements.network_performance:
            label = instance.network_performance
            if any(wanted in label for wanted in requirements.network_performance):
                score += self.NETWORK_BONUS
                reasons.append(f"High-performance networking ({label})")

        if instance.CurrentGeneration:
            score += self.CURRENT_GENERATION_BONUS
            reasons.append("Current generation instance")

        return int(min(score, 100))

    def score_cost(
        self,
        instance: InstanceType,
        pricing: PricingInfo,
        reasons: list[str],
    ) -> int:
        """Score cost efficiency per vCPU and per GiB, plus spot savings."""
        score = BASE_SCORE

        # Unknown price: neutral, no reasons
        if not pricing.has_on_demand:
            return score

        cost_per_vcpu = pricing.on_demand / instance.vcpus
        cost_per_gib = pricing.on_demand / instance.memory_gib

        for threshold, bonus, label in self.COST_PER_VCPU_TIERS:
            if cost_per_vcpu < threshold:
                score += bonus
                reasons.append(f"{label} cost per vCPU")
                break

        for threshold, bonus, label in self.COST_PER_GIB_TIERS:
            if cost_per_gib < threshold:
                score += bonus
                reasons.append(f"{label} cost per GiB memory")
                break

        if 0 < pricing.spot_current < pricing.on_demand * self.SPOT_DISCOUNT_THRESHOLD:
            score += self.SPOT_BONUS
            savings = round_half_up(
                (pricing.on_demand - pricing.spot_current) / pricing.on_demand * 100
            )
            reasons.append(f"Excellent spot savings ({savings}% off)")

        return int(min(score, 100))

    def score_efficiency(
        self,
        instance: InstanceType,
        requirements: ComputeRequirements,
        reasons: list[str],
    ) -> int:
        """Score right-sizing; over-provisioning is penalized."""
        score = BASE_SCORE
        memory_gib = instance.memory_gib

        if requirements.min_vcpus:
            score += self._sizing_adjustment(
                instance.vcpus / requirements.min_vcpus, "CPU", reasons
            )

        if requirements.min_memory_gib:
            score += self._sizing_adjustment(
                memory_gib / requirements.min_memory_gib, "memory", reasons
            )

        low, high = self.BALANCED_RATIO_RANGE
        if low <= memory_gib / instance.vcpus <= high:
            score += self.BALANCED_RATIO_BONUS
            reasons.append("Balanced CPU-to-memory ratio")

        return int(_clamp(score))

    def _capacity_tier(self, ratio: float) -> Optional[tuple[int, str]]:
        """Return (bonus, label) for a capacity ratio, or None below 1."""
        for min_ratio, bonus, label in self.CAPACITY_TIERS:
            if ratio >= min_ratio:
                return bonus, label
        return None

    def _sizing_adjustment(self, ratio: float, resource: str, reasons: list[str]) -> int:
        """Adjustment for one over-provisioning ratio."""
        if ratio > 3:
            reasons.append(f"Significant {resource} over-provisioning")
            return -15
        if ratio > 2:
            reasons.append(f"Moderate {resource} over-provisioning")
            return -5
        if 1 <= ratio <= 1.5:
            reasons.append(f"Efficient {resource} sizing")
            return 10
        return 0
