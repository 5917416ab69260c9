import pytest

from startup_index.core.errors import InvalidFactorError
from startup_index.core.examples import get_example
from startup_index.core.models import Factor, FactorSet, MarketTimingMode, ViabilityTier
from startup_index.core.scoring import (
    FACTOR_WEIGHTS,
    SCORE_DIVISOR,
    adjust_market_timing,
    compute_score,
    interpret_score,
    score_startup,
    weighted_contributions,
)

from .conftest import factor_dict


def test_neutral_factors_score_weight_sum_over_divisor(neutral_factors):
    # Weights sum to 13.2, so a factor set of all 0.5 lands just above the midpoint
    assert sum(FACTOR_WEIGHTS.values()) == pytest.approx(13.2)
    assert compute_score(neutral_factors) == pytest.approx(0.55)
    assert compute_score(neutral_factors, MarketTimingMode.PASS_THROUGH) == pytest.approx(0.55)


def test_best_case_clamps_to_one(best_factors):
    # The best market timing is the middle of the 0.4-0.7 sweet spot
    assert best_factors.market_timing == 0.55
    assert adjust_market_timing(best_factors.market_timing) == 0.55
    assert compute_score(best_factors) == 1.0
    assert compute_score(best_factors, MarketTimingMode.PASS_THROUGH) == 1.0
    result = score_startup(best_factors)
    assert result.weighted_sum / SCORE_DIVISOR > 1.0
    assert result.score == 1.0


def test_worst_case_uses_market_timing_floor(worst_factors):
    assert compute_score(worst_factors) == pytest.approx(0.22 / 12)
    assert compute_score(worst_factors, MarketTimingMode.PASS_THROUGH) == 0.0


def test_stripe_scores_by_mode():
    stripe = get_example("Stripe").factors
    assert compute_score(stripe, MarketTimingMode.PASS_THROUGH) == pytest.approx(0.8625)
    assert compute_score(stripe, MarketTimingMode.PIECEWISE) == pytest.approx(0.835)


def test_theranos_is_unaffected_by_mode_in_sweet_spot():
    theranos = get_example("Theranos").factors
    assert theranos.market_timing == 0.6
    piecewise = compute_score(theranos, MarketTimingMode.PIECEWISE)
    assert piecewise == compute_score(theranos, MarketTimingMode.PASS_THROUGH)
    assert piecewise == pytest.approx(0.454167, abs=1e-5)


def test_score_is_deterministic(neutral_factors):
    assert compute_score(neutral_factors) == compute_score(neutral_factors)
    assert score_startup(neutral_factors) == score_startup(neutral_factors)


@pytest.mark.parametrize("value", [0.0, 0.1, 0.3, 0.5, 0.77, 1.0])
def test_score_stays_in_unit_interval(value):
    for mode in MarketTimingMode:
        assert 0.0 <= compute_score(FactorSet.defaults(value), mode) <= 1.0


@pytest.mark.parametrize("factor", [
    Factor.MARKET_SIZE,
    Factor.BARRIER_TO_ENTRY,
    Factor.DEFENSIBILITY,
    Factor.INSIGHT_FACTOR,
    Factor.TEAM_FACTOR,
    Factor.CAPITAL_EFFICIENCY,
    Factor.DISTRIBUTION_ADVANTAGE,
    Factor.BUSINESS_MODEL_VIABILITY,
])
def test_positive_factors_raise_score(neutral_factors, factor):
    assert compute_score(neutral_factors.with_factor(factor, 0.9)) > compute_score(neutral_factors)


@pytest.mark.parametrize("factor", [Factor.COMPLEXITY, Factor.RISK_FACTOR, Factor.COMPETITION_INTENSITY])
def test_complemented_factors_lower_score(neutral_factors, factor):
    assert compute_score(neutral_factors.with_factor(factor, 0.9)) < compute_score(neutral_factors)


def test_piecewise_market_timing_is_not_monotonic(neutral_factors):
    early = compute_score(neutral_factors.with_factor("marketTiming", 0.35))
    sweet = compute_score(neutral_factors.with_factor("marketTiming", 0.45))
    late = compute_score(neutral_factors.with_factor("marketTiming", 0.95))
    # 0.35 is lifted to 0.5, which beats 0.45 passed through unchanged
    assert early > sweet
    assert late < sweet


def test_pass_through_market_timing_is_monotonic(neutral_factors):
    mode = MarketTimingMode.PASS_THROUGH
    low = compute_score(neutral_factors.with_factor("marketTiming", 0.35), mode)
    high = compute_score(neutral_factors.with_factor("marketTiming", 0.95), mode)
    assert high > low


@pytest.mark.parametrize("value,expected", [
    (0.0, 0.2),
    (0.2, 0.2),
    (0.21, 0.5),
    (0.4, 0.5),
    (0.41, 0.41),
    (0.7, 0.7),
    (0.71, 0.5),
    (0.9, 0.5),
    (0.91, 0.2),
    (1.0, 0.2),
])
def test_adjust_market_timing_piecewise(value, expected):
    assert adjust_market_timing(value) == pytest.approx(expected)


def test_adjust_market_timing_pass_through():
    assert adjust_market_timing(0.95, MarketTimingMode.PASS_THROUGH) == 0.95
    assert adjust_market_timing(0.95, "pass_through") == 0.95


def test_mapping_input_is_clamped():
    values = factor_dict(0.5)
    values["marketSize"] = 7
    values["riskFactor"] = -3
    clamped = factor_dict(0.5)
    clamped["marketSize"] = 1.0
    clamped["riskFactor"] = 0.0
    assert compute_score(values) == compute_score(clamped)


def test_mapping_input_requires_all_factors():
    values = factor_dict(0.5)
    del values["teamFactor"]
    with pytest.raises(InvalidFactorError, match="teamFactor"):
        compute_score(values)


def test_non_finite_factor_rejected():
    values = factor_dict(0.5)
    values["marketSize"] = float("nan")
    with pytest.raises(InvalidFactorError):
        compute_score(values)


def test_contributions_sum_to_weighted_sum(neutral_factors):
    contributions = weighted_contributions(neutral_factors)
    assert [c.factor for c in contributions] == list(Factor)
    result = score_startup(neutral_factors)
    assert result.weighted_sum == pytest.approx(sum(c.contribution for c in contributions))
    complexity = contributions[4]
    assert complexity.factor is Factor.COMPLEXITY
    assert complexity.adjusted_value == pytest.approx(0.5)
    assert complexity.contribution == pytest.approx(0.4)


@pytest.mark.parametrize("score,tier,label", [
    (1.0, ViabilityTier.EXCEPTIONAL, "Exceptional Viability"),
    (0.8, ViabilityTier.EXCEPTIONAL, "Exceptional Viability"),
    (0.79, ViabilityTier.STRONG, "Strong Viability"),
    (0.6, ViabilityTier.STRONG, "Strong Viability"),
    (0.55, ViabilityTier.MODERATE, "Moderate Viability"),
    (0.2, ViabilityTier.CHALLENGING, "Challenging Viability"),
    (0.19, ViabilityTier.LOW, "Low Viability"),
    (0.0, ViabilityTier.LOW, "Low Viability"),
])
def test_interpret_score_tiers(score, tier, label):
    result_tier, interpretation, description = interpret_score(score)
    assert result_tier is tier
    assert interpretation == label
    assert description


def test_score_startup_reports_mode(neutral_factors):
    result = score_startup(neutral_factors, "pass_through")
    assert result.market_timing_mode is MarketTimingMode.PASS_THROUGH
    assert result.tier is ViabilityTier.MODERATE


def test_piecewise_rewards_the_timing_sweet_spot(neutral_factors):
    sweet = compute_score(neutral_factors.with_factor("marketTiming", 0.55))
    assert sweet > compute_score(neutral_factors.with_factor("marketTiming", 0.05))
    assert sweet > compute_score(neutral_factors.with_factor("marketTiming", 0.95))
