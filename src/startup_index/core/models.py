"""Pydantic data models: the shared business objects.

The scoring engine, the analysis pipeline, the local store and the MCP server
all exchange these models. Factor names travel in camelCase on the wire
(``marketSize``) and are snake_case attributes in Python (``market_size``).
"""

from __future__ import annotations

import math
from datetime import datetime
from enum import Enum
from typing import Any, Iterator, Mapping, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from .errors import InvalidFactorError, UnknownFactorError


class Factor(str, Enum):
    """The twelve scoring factors, in canonical order."""

    MARKET_SIZE = "marketSize"
    BARRIER_TO_ENTRY = "barrierToEntry"
    DEFENSIBILITY = "defensibility"
    INSIGHT_FACTOR = "insightFactor"
    COMPLEXITY = "complexity"
    RISK_FACTOR = "riskFactor"
    TEAM_FACTOR = "teamFactor"
    MARKET_TIMING = "marketTiming"
    COMPETITION_INTENSITY = "competitionIntensity"
    CAPITAL_EFFICIENCY = "capitalEfficiency"
    DISTRIBUTION_ADVANTAGE = "distributionAdvantage"
    BUSINESS_MODEL_VIABILITY = "businessModelViability"

    @property
    def attr(self) -> str:
        """Attribute name on FactorSet (snake_case)."""
        return self.name.lower()

    @classmethod
    def parse(cls, name: Union[str, "Factor"]) -> "Factor":
        """Resolve a Factor from an enum member, camelCase or snake_case name."""
        if isinstance(name, cls):
            return name
        if isinstance(name, str):
            key = name.strip()
            for factor in cls:
                if key == factor.value or key.lower() == factor.attr:
                    return factor
        raise UnknownFactorError(f"Unknown factor: {name!r}. Expected one of: {', '.join(f.value for f in cls)}")


FactorName = Union[Factor, str]


class MarketTimingMode(str, Enum):
    """How marketTiming is transformed before weighting."""

    PIECEWISE = "piecewise"
    PASS_THROUGH = "pass_through"


class ViabilityTier(str, Enum):
    """Qualitative bucket for a score."""

    EXCEPTIONAL = "exceptional"
    STRONG = "strong"
    MODERATE = "moderate"
    CHALLENGING = "challenging"
    LOW = "low"


class StartupCategory(str, Enum):
    """Outcome category of a preset example startup."""

    UNICORN = "unicorn"
    MEDIUM = "medium"
    FAILED = "failed"


class ExampleRegion(str, Enum):
    """Which preset example library an example belongs to."""

    GLOBAL = "global"
    INDIAN = "indian"


class FileType(str, Enum):
    """Coarse type of an uploaded document."""

    PDF = "pdf"
    IMAGE = "image"
    PRESENTATION = "presentation"
    DOCUMENT = "document"
    UNKNOWN = "unknown"


class FactorSet(BaseModel):
    """Twelve normalized factor values, each clamped to [0, 1].

    Out-of-range finite values are clamped on construction. Non-numeric and
    non-finite values are rejected.
    """

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    market_size: float = Field(alias="marketSize", description="Total addressable market")
    barrier_to_entry: float = Field(alias="barrierToEntry", description="Difficulty for new competitors to enter")
    defensibility: float = Field(alias="defensibility", description="Ability to defend an established position")
    insight_factor: float = Field(alias="insightFactor", description="Uniqueness of the core insight")
    complexity: float = Field(alias="complexity", description="Product or business complexity (higher is worse)")
    risk_factor: float = Field(alias="riskFactor", description="Overall risk profile (higher is worse)")
    team_factor: float = Field(alias="teamFactor", description="Strength of the founding team")
    market_timing: float = Field(alias="marketTiming", description="0 = far too early, 1 = far too late")
    competition_intensity: float = Field(alias="competitionIntensity", description="Strength of competition (higher is worse)")
    capital_efficiency: float = Field(alias="capitalEfficiency", description="Conversion of capital into growth")
    distribution_advantage: float = Field(alias="distributionAdvantage", description="Ease of reaching customers")
    business_model_viability: float = Field(alias="businessModelViability", description="Soundness of the unit economics")

    @field_validator("*", mode="before")
    @classmethod
    def _clamp_unit_interval(cls, value: Any, info) -> float:
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            raise ValueError(f"{info.field_name} must be a number, got {value!r}")
        value = float(value)
        if not math.isfinite(value):
            raise ValueError(f"{info.field_name} must be a finite number, got {value}")
        return min(1.0, max(0.0, value))

    @classmethod
    def defaults(cls, value: float = 0.5) -> "FactorSet":
        """A factor set with every factor at the same value (midpoint by default)."""
        return cls.model_validate({factor.value: value for factor in Factor})

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any], fill: Optional[float] = None) -> "FactorSet":
        """Build a FactorSet from camelCase or snake_case keys.

        Missing factors are an error unless ``fill`` is given.
        """
        values: dict[str, Any] = {}
        for key, value in data.items():
            values[Factor.parse(key).value] = value

        missing = [f.value for f in Factor if f.value not in values]
        if missing:
            if fill is None:
                raise InvalidFactorError(f"Missing factors: {', '.join(missing)}")
            for name in missing:
                values[name] = fill

        try:
            return cls.model_validate(values)
        except ValidationError as exc:
            messages = "; ".join(err["msg"] for err in exc.errors())
            raise InvalidFactorError(messages) from exc

    def get(self, factor: FactorName) -> float:
        return getattr(self, Factor.parse(factor).attr)

    def with_factor(self, factor: FactorName, value: float) -> "FactorSet":
        """Return a copy with one factor replaced (and clamped)."""
        updated = self.to_wire()
        updated[Factor.parse(factor).value] = value
        return FactorSet.from_mapping(updated)

    def items(self) -> Iterator[tuple[Factor, float]]:
        for factor in Factor:
            yield factor, getattr(self, factor.attr)

    def to_wire(self) -> dict[str, float]:
        """camelCase mapping in canonical factor order."""
        return {factor.value: value for factor, value in self.items()}

    @property
    def is_all_zero(self) -> bool:
        return all(value == 0.0 for _, value in self.items())


class FactorContribution(BaseModel):
    """One term of the weighted sum."""

    factor: Factor
    value: float = Field(description="Factor value as supplied (after clamping)")
    adjusted_value: float = Field(description="Value after complement or market timing transform")
    weight: float
    contribution: float = Field(description="weight * adjusted_value")


class ScoreResult(BaseModel):
    """A computed score with its breakdown and interpretation."""

    score: float = Field(ge=0.0, le=1.0, description="Startup Success Index from 0 to 1")
    weighted_sum: float
    tier: ViabilityTier
    interpretation: str = Field(description="Short label, e.g. 'Strong Viability'")
    description: str = Field(description="One-sentence explanation of the tier")
    market_timing_mode: MarketTimingMode
    contributions: list[FactorContribution]


class FactorDescription(BaseModel):
    """Presentation text for one factor at one value."""

    factor: Factor
    value: float
    label: str
    tooltip: str
    band_text: str = Field(description="Short qualitative bucket for the value")
    description: str = Field(description="One-sentence description of the bucket")


class StartupExample(BaseModel):
    """A preset example startup."""

    name: str
    description: str
    category: StartupCategory
    region: ExampleRegion
    factors: FactorSet
    reference_score: Optional[float] = Field(None, description="Hand-entered score shown on the example card, if any")


class PitchDeckAnalysis(BaseModel):
    """Factors extracted from a document by an LLM.

    ``is_pitch_deck`` is explicit; an all-zero factor set alone does not mean
    the document was rejected.
    """

    is_pitch_deck: bool
    factors: FactorSet
    explanations: dict[str, str] = Field(default_factory=dict)
    summary: str = ""
    score: Optional[float] = Field(None, ge=0.0, le=1.0)
    file_name: Optional[str] = None
    provider: Optional[str] = None


class StartupIdea(BaseModel):
    """A generated startup idea with suggested factors."""

    name: str
    description: str
    overview: str = ""
    factors: FactorSet
    explanations: dict[str, str] = Field(default_factory=dict)
    score: Optional[float] = Field(None, ge=0.0, le=1.0)


class StartupRecord(BaseModel):
    """A saved startup."""

    id: str
    user_id: str
    name: str
    description: Optional[str] = None
    factors: FactorSet
    score: float = Field(ge=0.0, le=1.0)
    scored_manually: bool = True
    manually_edited: bool = False
    created_at: datetime
    updated_at: datetime


class ScoreHistoryEntry(BaseModel):
    """A point-in-time snapshot of a saved startup's score."""

    score: float
    manually_edited: bool
    factors: FactorSet
    recorded_at: datetime


class UsageStatus(BaseModel):
    """Free analysis allowance for a user."""

    user_id: str
    free_analyses_used: int
    free_analyses_limit: int

    @property
    def remaining(self) -> int:
        return max(0, self.free_analyses_limit - self.free_analyses_used)
