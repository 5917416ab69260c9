"""Startup Success Index scoring engine.

Converts twelve normalized factors into a single viability score in [0, 1].
Every front end imports this module; there is exactly one copy of the
formula, its weights and its market timing transform.
"""

from __future__ import annotations

import logging
from typing import Any, Mapping, Union

from .models import (
    Factor,
    FactorContribution,
    FactorSet,
    MarketTimingMode,
    ScoreResult,
    ViabilityTier,
)

logger = logging.getLogger(__name__)

FACTOR_WEIGHTS: dict[Factor, float] = {
    Factor.MARKET_SIZE: 1.2,
    Factor.BARRIER_TO_ENTRY: 1.0,
    Factor.DEFENSIBILITY: 1.2,
    Factor.INSIGHT_FACTOR: 1.1,
    Factor.COMPLEXITY: 0.8,
    Factor.RISK_FACTOR: 1.3,
    Factor.TEAM_FACTOR: 1.2,
    Factor.MARKET_TIMING: 1.1,
    Factor.COMPETITION_INTENSITY: 0.9,
    Factor.CAPITAL_EFFICIENCY: 1.0,
    Factor.DISTRIBUTION_ADVANTAGE: 1.1,
    Factor.BUSINESS_MODEL_VIABILITY: 1.3,
}

# Higher raw values are worse outcomes for these; they contribute (1 - value).
COMPLEMENTED_FACTORS = frozenset({
    Factor.COMPLEXITY,
    Factor.RISK_FACTOR,
    Factor.COMPETITION_INTENSITY,
})

# Number of terms, not the sum of the weights.
SCORE_DIVISOR = 12

DEFAULT_MARKET_TIMING_MODE = MarketTimingMode.PIECEWISE

# (upper bound, tier, interpretation, description), checked from the top.
VIABILITY_TIERS = [
    (0.8, ViabilityTier.EXCEPTIONAL, "Exceptional Viability", "Revolutionary insight with large market and strong defensible position."),
    (0.6, ViabilityTier.STRONG, "Strong Viability", "Strong market position with clear competitive advantages."),
    (0.4, ViabilityTier.MODERATE, "Moderate Viability", "Good market opportunity with some competitive advantages."),
    (0.2, ViabilityTier.CHALLENGING, "Challenging Viability", "Limited market or advantages with high execution complexity."),
]
LOW_VIABILITY = (ViabilityTier.LOW, "Low Viability", "Small market or no advantages with extreme complexity or risk.")

FactorInput = Union[FactorSet, Mapping[str, Any]]


def clamp01(value: float) -> float:
    return max(0.0, min(1.0, value))


def adjust_market_timing(value: float, mode: MarketTimingMode = DEFAULT_MARKET_TIMING_MODE) -> float:
    """Apply the market timing transform.

    PIECEWISE rewards the middle of the scale and penalizes being too early
    or too late; values between 0.4 and 0.7 pass through unchanged.
    PASS_THROUGH uses the raw value.
    """
    mode = MarketTimingMode(mode)
    if mode is MarketTimingMode.PASS_THROUGH:
        return value

    if value <= 0.2:
        return 0.2
    elif value <= 0.4:
        return 0.5
    elif value <= 0.7:
        return value
    elif value <= 0.9:
        return 0.5
    return 0.2


def _as_factor_set(factors: FactorInput) -> FactorSet:
    if isinstance(factors, FactorSet):
        return factors
    return FactorSet.from_mapping(factors)


def adjusted_value(factor: Factor, value: float, mode: MarketTimingMode = DEFAULT_MARKET_TIMING_MODE) -> float:
    """The value a factor contributes to the weighted sum, before its weight."""
    if factor is Factor.MARKET_TIMING:
        return adjust_market_timing(value, mode)
    if factor in COMPLEMENTED_FACTORS:
        return 1.0 - value
    return value


def weighted_contributions(
    factors: FactorInput,
    mode: MarketTimingMode = DEFAULT_MARKET_TIMING_MODE,
) -> list[FactorContribution]:
    """Per-factor terms of the weighted sum, in canonical factor order."""
    factor_set = _as_factor_set(factors)
    terms = []
    for factor, value in factor_set.items():
        adjusted = adjusted_value(factor, value, mode)
        weight = FACTOR_WEIGHTS[factor]
        terms.append(FactorContribution(
            factor=factor,
            value=value,
            adjusted_value=adjusted,
            weight=weight,
            contribution=weight * adjusted,
        ))
    return terms


def compute_score(
    factors: FactorInput,
    mode: MarketTimingMode = DEFAULT_MARKET_TIMING_MODE,
) -> float:
    """Compute the Startup Success Index for a factor set.

    Args:
        factors: A FactorSet, or a mapping of all twelve factor names to
            finite numbers. Mapping values are clamped to [0, 1].
        mode: Market timing transform to apply. Defaults to PIECEWISE.

    Returns:
        The weighted sum divided by 12, clamped to [0, 1].
    """
    factor_set = _as_factor_set(factors)
    weighted_sum = sum(
        FACTOR_WEIGHTS[factor] * adjusted_value(factor, value, mode)
        for factor, value in factor_set.items()
    )
    return clamp01(weighted_sum / SCORE_DIVISOR)


def interpret_score(score: float) -> tuple[ViabilityTier, str, str]:
    """Map a score to (tier, interpretation, description)."""
    for threshold, tier, interpretation, description in VIABILITY_TIERS:
        if score >= threshold:
            return tier, interpretation, description
    return LOW_VIABILITY


def score_startup(
    factors: FactorInput,
    mode: MarketTimingMode = DEFAULT_MARKET_TIMING_MODE,
) -> ScoreResult:
    """Compute the score together with its breakdown and interpretation."""
    mode = MarketTimingMode(mode)
    contributions = weighted_contributions(factors, mode)
    weighted_sum = sum(c.contribution for c in contributions)
    score = clamp01(weighted_sum / SCORE_DIVISOR)
    tier, interpretation, description = interpret_score(score)

    logger.debug("Scored factor set: %.4f (%s, mode=%s)", score, tier.value, mode.value)

    return ScoreResult(
        score=score,
        weighted_sum=weighted_sum,
        tier=tier,
        interpretation=interpretation,
        description=description,
        market_timing_mode=mode,
        contributions=contributions,
    )
