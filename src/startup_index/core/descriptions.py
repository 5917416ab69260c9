"""Display labels, tooltips and value-band descriptions for each factor.

Values are bucketed into five bands: <=0.2, <=0.4, <=0.6, <=0.8 and >0.8.
"""

from __future__ import annotations

import math

from .errors import InvalidFactorError
from .models import Factor, FactorDescription, FactorName

BAND_UPPER_BOUNDS = (0.2, 0.4, 0.6, 0.8)

FACTOR_LABELS: dict[Factor, str] = {
    Factor.MARKET_SIZE: "Market Size",
    Factor.BARRIER_TO_ENTRY: "Barrier to Entry",
    Factor.DEFENSIBILITY: "Defensibility",
    Factor.INSIGHT_FACTOR: "Insight Factor",
    Factor.COMPLEXITY: "Complexity",
    Factor.RISK_FACTOR: "Risk Factor",
    Factor.TEAM_FACTOR: "Team Factor",
    Factor.MARKET_TIMING: "Market Timing",
    Factor.COMPETITION_INTENSITY: "Competition Intensity",
    Factor.CAPITAL_EFFICIENCY: "Capital Efficiency",
    Factor.DISTRIBUTION_ADVANTAGE: "Distribution Advantage",
    Factor.BUSINESS_MODEL_VIABILITY: "Business Model Viability",
}

FACTOR_TOOLTIPS: dict[Factor, str] = {
    Factor.MARKET_SIZE: "The total addressable market (TAM) for your product or service. Larger markets typically offer more opportunity but may attract more competition.",
    Factor.BARRIER_TO_ENTRY: "How difficult it is for new competitors to enter your market. Higher barriers provide better protection for early movers.",
    Factor.DEFENSIBILITY: "How effectively you can defend your position once established. This includes patents, network effects, scale advantages, etc.",
    Factor.INSIGHT_FACTOR: "The uniqueness and value of your core insight. Revolutionary insights that others have missed can create outsized returns.",
    Factor.COMPLEXITY: "How complicated your product, technology, or business model is. Higher complexity increases execution risk.",
    Factor.RISK_FACTOR: "The overall risk profile including technology risk, market risk, regulatory risk, etc.",
    Factor.TEAM_FACTOR: "The quality, experience, and domain expertise of your founding team. Strong teams can navigate challenges better.",
    Factor.MARKET_TIMING: "Whether the market is ready for your solution. Too early means educating customers; too late means fighting established competitors.",
    Factor.COMPETITION_INTENSITY: "The number and strength of competitors in your space. Higher intensity means more resources needed to win.",
    Factor.CAPITAL_EFFICIENCY: "How efficiently you can convert investment capital into growth and profitability. Better efficiency means less dilution.",
    Factor.DISTRIBUTION_ADVANTAGE: "Your ability to efficiently reach and acquire customers. Strong distribution advantages lower customer acquisition costs.",
    Factor.BUSINESS_MODEL_VIABILITY: "The fundamental economic viability of your business model, including unit economics and the path to sustainable revenue.",
}

# Five entries per factor, one per band.
BAND_TEXT: dict[Factor, tuple[str, str, str, str, str]] = {
    Factor.MARKET_SIZE: (
        "Tiny market (<$10M)",
        "Small market ($10M-$100M)",
        "Medium market ($100M-$1B)",
        "Large market ($1B-$10B)",
        "Massive market (>$10B)",
    ),
    Factor.BARRIER_TO_ENTRY: (
        "Almost no barriers (e.g., basic website)",
        "Low barriers (simple tech, no regulations)",
        "Moderate barriers (some tech/regulatory requirements)",
        "High barriers (significant tech/regulatory/network effects)",
        "Extreme barriers (deep tech, heavy regulation, strong network effects)",
    ),
    Factor.DEFENSIBILITY: (
        "No unique advantage",
        "Weak advantages (easily replicable)",
        "Some advantages (head start, partnerships)",
        "Strong advantages (patents, exclusive deals, network effects)",
        "Exceptional advantages (breakthrough tech, strong moats)",
    ),
    Factor.INSIGHT_FACTOR: (
        "Obvious solution/common knowledge",
        "Minor improvement on existing solutions",
        "Novel combination of existing ideas",
        "Unique insight others missed",
        "Revolutionary insight",
    ),
    Factor.COMPLEXITY: (
        "Very simple",
        "Simple",
        "Moderate",
        "Complex",
        "Extremely complex",
    ),
    Factor.RISK_FACTOR: (
        "Minimal risk (proven technology/market)",
        "Low risk (established patterns)",
        "Moderate risk (some uncertainties)",
        "High risk (significant unknowns)",
        "Extreme risk (unproven tech/market/regulations)",
    ),
    Factor.TEAM_FACTOR: (
        "Weak team (no relevant experience, skill gaps)",
        "Basic team (some experience but limited domain expertise)",
        "Solid team (good domain expertise, complementary skills)",
        "Strong team (proven domain experts, prior successes)",
        "Exceptional team (serial successful founders, deep expertise)",
    ),
    Factor.MARKET_TIMING: (
        "Significantly too early (5+ years ahead of market)",
        "Somewhat early (market emerging but adoption hurdles remain)",
        "Optimal timing (technology, regulations, and market aligned)",
        "Slightly late (established competition but market share available)",
        "Very late (market mature, dominant players established)",
    ),
    Factor.COMPETITION_INTENSITY: (
        "Minimal competition (blue ocean, no direct competitors)",
        "Limited competition (few underfunded competitors)",
        "Moderate competition (several competitors but no dominant player)",
        "Strong competition (multiple well-funded competitors)",
        "Intense competition (dominated by large incumbents)",
    ),
    Factor.CAPITAL_EFFICIENCY: (
        "Extremely capital intensive (years to profitability)",
        "Moderately capital intensive (18+ months to profitability)",
        "Average capital efficiency (12-18 months to profitability)",
        "Good capital efficiency (6-12 months to profitability)",
        "Exceptional capital efficiency (quick path to profitability)",
    ),
    Factor.DISTRIBUTION_ADVANTAGE: (
        "Extremely difficult distribution (high friction, costly CAC)",
        "Challenging distribution (limited channel access, high touch sales)",
        "Moderate distribution advantage (established channels available)",
        "Strong distribution advantage (efficient channels, viral potential)",
        "Exceptional distribution advantage (existing channels, high virality)",
    ),
    Factor.BUSINESS_MODEL_VIABILITY: (
        "Flawed model (no clear path to revenue)",
        "Weak economics (thin or negative margins)",
        "Standard model (proven but unremarkable economics)",
        "Strong economics (healthy margins, recurring revenue)",
        "Exceptional model (outstanding unit economics at scale)",
    ),
}

BAND_DESCRIPTIONS: dict[Factor, tuple[str, str, str, str, str]] = {
    Factor.MARKET_SIZE: (
        "Very small market opportunity limiting growth potential.",
        "Modest market size with limited growth ceiling.",
        "Healthy market size with room for multiple successful players.",
        "Substantial market opportunity supporting significant scale.",
        "Enormous market potential allowing for extensive growth.",
    ),
    Factor.BARRIER_TO_ENTRY: (
        "Anyone can easily enter this market with minimal investment.",
        "Some investment needed but relatively easy to copy.",
        "Noticeable hurdles exist for new entrants.",
        "Significant obstacles exist for potential competitors.",
        "Very difficult for new competitors to enter this space.",
    ),
    Factor.DEFENSIBILITY: (
        "No meaningful way to defend position once established.",
        "Limited ability to protect position from competitors.",
        "Moderate moats providing some competitive protection.",
        "Strong barriers protecting established position.",
        "Extremely difficult for competitors to displace once established.",
    ),
    Factor.INSIGHT_FACTOR: (
        "Common idea that many others are likely executing on.",
        "Small improvement on existing solutions in the market.",
        "Creative recombination of existing ideas in a fresh way.",
        "Original approach that creates meaningful differentiation.",
        "Transformative insight creating new market category.",
    ),
    Factor.COMPLEXITY: (
        "Straightforward solution with minimal moving parts.",
        "Relatively simple implementation with few components.",
        "Moderate complexity requiring careful management.",
        "Sophisticated system with many interdependent elements.",
        "Highly complex with numerous technical challenges.",
    ),
    Factor.RISK_FACTOR: (
        "Very low risk profile with proven approaches.",
        "Modest risk with established patterns to follow.",
        "Average risk level with known challenges to address.",
        "Significant risk requiring careful mitigation strategies.",
        "Extreme risk profile with major uncertainties.",
    ),
    Factor.TEAM_FACTOR: (
        "Team lacks essential skills or relevant experience.",
        "Basic capability but missing important expertise.",
        "Competent team with relevant domain knowledge.",
        "High-performing team with proven track record.",
        "World-class team with exceptional domain expertise.",
    ),
    Factor.MARKET_TIMING: (
        "Market not ready, requiring extensive education.",
        "Early stage market with adoption challenges.",
        "Perfect timing with market readiness matching solution.",
        "Market established but still has growth potential.",
        "Mature market with established buying patterns.",
    ),
    Factor.COMPETITION_INTENSITY: (
        "Virtually no direct competition in this space.",
        "Limited competition with few established players.",
        "Moderate competition with differentiated offerings.",
        "Significant competition requiring clear differentiation.",
        "Extremely competitive market dominated by established players.",
    ),
    Factor.CAPITAL_EFFICIENCY: (
        "Requires massive capital investment before revenue.",
        "Significant funding needed for extended period.",
        "Normal capital requirements with standard payback period.",
        "Capital-efficient with relatively quick path to revenue.",
        "Highly efficient capital utilization with fast returns.",
    ),
    Factor.DISTRIBUTION_ADVANTAGE: (
        "Very difficult to reach target customers cost-effectively.",
        "Challenging distribution requiring significant resources.",
        "Standard distribution channels with average CAC.",
        "Effective distribution with below-average acquisition costs.",
        "Exceptional distribution advantages with viral potential.",
    ),
    Factor.BUSINESS_MODEL_VIABILITY: (
        "No credible way to turn usage into sustainable revenue.",
        "Revenue model exists but margins are unlikely to cover costs.",
        "Conventional business model with typical margins.",
        "Attractive unit economics with a clear path to profitability.",
        "Outstanding economics that improve as the business scales.",
    ),
}


def band_index(value: float) -> int:
    """Index (0-4) of the band a value falls in.

    Raises InvalidFactorError for NaN, infinities, booleans and non-numbers.
    """
    if isinstance(value, bool) or not isinstance(value, (int, float)) or not math.isfinite(value):
        raise InvalidFactorError(f"Factor value must be a finite number, got {value!r}")
    for index, upper in enumerate(BAND_UPPER_BOUNDS):
        if value <= upper:
            return index
    return len(BAND_UPPER_BOUNDS)


def factor_label(factor: FactorName) -> str:
    return FACTOR_LABELS[Factor.parse(factor)]


def factor_tooltip(factor: FactorName) -> str:
    return FACTOR_TOOLTIPS[Factor.parse(factor)]


def describe_factor(factor: FactorName, value: float) -> str:
    """Short qualitative text for a factor value, e.g. 'Large market ($1B-$10B)'."""
    return BAND_TEXT[Factor.parse(factor)][band_index(value)]


def factor_description(factor: FactorName, value: float) -> str:
    """One-sentence description for a factor value."""
    return BAND_DESCRIPTIONS[Factor.parse(factor)][band_index(value)]


def explain_factor(factor: FactorName, value: float) -> FactorDescription:
    """All presentation text for one factor at one value."""
    factor = Factor.parse(factor)
    return FactorDescription(
        factor=factor,
        value=value,
        label=FACTOR_LABELS[factor],
        tooltip=FACTOR_TOOLTIPS[factor],
        band_text=describe_factor(factor, value),
        description=factor_description(factor, value),
    )
