"""
Pytest fixtures for scoring, analysis, storage and server tests.
"""

import pytest
import pytest_asyncio

from startup_index.config import get_settings
from startup_index.core.models import Factor, FactorSet
from startup_index.db import close_db, init_db


# Every factor at its best: positives at 1, complemented factors at 0, timing in the sweet spot
BEST_FACTORS = {
    "marketSize": 1.0,
    "barrierToEntry": 1.0,
    "defensibility": 1.0,
    "insightFactor": 1.0,
    "complexity": 0.0,
    "riskFactor": 0.0,
    "teamFactor": 1.0,
    "marketTiming": 0.55,
    "competitionIntensity": 0.0,
    "capitalEfficiency": 1.0,
    "distributionAdvantage": 1.0,
    "businessModelViability": 1.0,
}

WORST_FACTORS = {
    "marketSize": 0.0,
    "barrierToEntry": 0.0,
    "defensibility": 0.0,
    "insightFactor": 0.0,
    "complexity": 1.0,
    "riskFactor": 1.0,
    "teamFactor": 0.0,
    "marketTiming": 0.0,
    "competitionIntensity": 1.0,
    "capitalEfficiency": 0.0,
    "distributionAdvantage": 0.0,
    "businessModelViability": 0.0,
}

PITCH_DECK_TEXT = (
    "Acme Robotics builds warehouse picking robots for mid-size retailers. "
    "ARR $1.2M growing 20% month over month. Team of ex-Amazon Robotics engineers. "
    "Raising a $5M seed round with 18 months of runway."
)


def fake_completion(response: str, calls: list | None = None):
    """An async completion function that records its calls and returns a fixed response."""

    async def complete(system, prompt, *, temperature, max_tokens):
        if calls is not None:
            calls.append({"system": system, "prompt": prompt, "temperature": temperature, "max_tokens": max_tokens})
        return response

    return complete


@pytest.fixture
def neutral_factors() -> FactorSet:
    return FactorSet.defaults()


@pytest.fixture
def best_factors() -> FactorSet:
    return FactorSet.from_mapping(BEST_FACTORS)


@pytest.fixture
def worst_factors() -> FactorSet:
    return FactorSet.from_mapping(WORST_FACTORS)


@pytest.fixture
def clean_env(monkeypatch, tmp_path):
    """Isolate settings from the developer's environment."""
    for name in (
        "ANTHROPIC_API_KEY",
        "CLAUDE_API_KEY",
        "OPENAI_API_KEY",
        "SSI_LLM_PROVIDER",
        "SSI_ANTHROPIC_MODEL",
        "SSI_OPENAI_MODEL",
        "SSI_FREE_ANALYSES_LIMIT",
        "SSI_MARKET_TIMING_MODE",
    ):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("DATA_DIR", str(tmp_path / "data"))
    get_settings.cache_clear()
    yield monkeypatch
    get_settings.cache_clear()


@pytest_asyncio.fixture
async def database(clean_env):
    """A fresh SQLite database in a temporary data directory."""
    await close_db()
    await init_db()
    yield
    await close_db()


def factor_dict(value: float) -> dict:
    return {factor.value: value for factor in Factor}
