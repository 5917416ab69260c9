import json

import pytest

from startup_index.core.analysis import (
    ANALYSIS_MAX_TOKENS,
    ANALYSIS_TEMPERATURE,
    IDEA_TEMPERATURE,
    INSUFFICIENT_TEXT_SUMMARY,
    MAX_PROMPT_CHARS,
    analyze_text,
    build_analysis_prompt,
    build_idea_prompt,
    extract_json,
    factors_from_response,
    generate_idea,
    parse_analysis_response,
    parse_idea_response,
)
from startup_index.core.errors import AnalysisParseError
from startup_index.core.models import Factor, FactorSet, MarketTimingMode
from startup_index.core.scoring import compute_score

from .conftest import PITCH_DECK_TEXT, factor_dict, fake_completion


def _analysis_json(value=0.7, **extra) -> str:
    payload = {"parameters": factor_dict(value), "summary": "Warehouse robots for retailers."}
    payload.update(extra)
    return json.dumps(payload)


def test_extract_json_from_json_fence():
    content = 'Here you go:\n```json\n{"isPitchDeck": true}\n```\nThanks'
    assert extract_json(content) == {"isPitchDeck": True}


def test_extract_json_from_plain_fence():
    content = '```\n{"name": "Acme"}\n```'
    assert extract_json(content) == {"name": "Acme"}


def test_extract_json_from_surrounding_prose():
    content = 'Sure! {"name": "Acme", "factors": {"marketSize": 0.8}} Hope this helps.'
    assert extract_json(content)["factors"] == {"marketSize": 0.8}


@pytest.mark.parametrize("content", ["not json at all", "{broken", "[1, 2, 3]"])
def test_extract_json_rejects_unusable_content(content):
    with pytest.raises(AnalysisParseError):
        extract_json(content)


def test_factors_from_response_coerces_values():
    factors = factors_from_response({
        "marketSize": "0.9",
        "team_factor": 1.5,
        "riskFactor": "high",
        "complexity": None,
        "burnRate": 0.4,
    })
    assert factors.market_size == 0.9
    assert factors.team_factor == 1.0
    assert factors.risk_factor == 0.0
    assert factors.complexity == 0.0
    assert factors.defensibility == 0.0


def test_parse_analysis_with_explicit_flag():
    content = _analysis_json(0.7, isPitchDeck=True, explanations={"market_size": "Big TAM", "other": "x"})
    analysis = parse_analysis_response(content, file_name="deck.pdf")
    assert analysis.is_pitch_deck
    assert analysis.factors == FactorSet.defaults(0.7)
    assert analysis.score == pytest.approx(compute_score(FactorSet.defaults(0.7)))
    assert analysis.explanations["marketSize"] == "Big TAM"
    assert analysis.explanations["other"] == "x"
    assert analysis.summary == "Warehouse robots for retailers."
    assert analysis.file_name == "deck.pdf"


def test_explicit_pitch_deck_flag_wins_over_all_zero_factors():
    analysis = parse_analysis_response(_analysis_json(0.0, isPitchDeck=True))
    assert analysis.is_pitch_deck
    assert analysis.score is not None


def test_missing_flag_infers_from_factors():
    assert not parse_analysis_response(_analysis_json(0.0)).is_pitch_deck
    assert parse_analysis_response(_analysis_json(0.4)).is_pitch_deck


def test_not_a_pitch_deck_has_no_score():
    analysis = parse_analysis_response(json.dumps({"isPitchDeck": False, "parameters": factor_dict(0)}))
    assert not analysis.is_pitch_deck
    assert analysis.score is None
    assert "does not appear to be a startup pitch deck" in analysis.summary


def test_string_flag_is_understood():
    analysis = parse_analysis_response(_analysis_json(0.5, isPitchDeck="false"))
    assert not analysis.is_pitch_deck


def test_analysis_prompt_truncates_long_text():
    text = "x" * (MAX_PROMPT_CHARS + 100)
    system, user = build_analysis_prompt(text, "big.pdf")
    assert "isPitchDeck" in system
    assert "... (truncated)" in user
    assert "x" * (MAX_PROMPT_CHARS + 1) not in user
    assert "Filename: big.pdf" in user


def test_analysis_prompt_lists_every_factor():
    system, _ = build_analysis_prompt("text")
    for factor in Factor:
        assert factor.value in system


def test_idea_prompt_variants():
    _, plain = build_idea_prompt()
    assert plain == "Generate an innovative startup idea that would score well across all the evaluation parameters."
    _, any_industry = build_idea_prompt("any", "any")
    assert any_industry == plain
    _, focused = build_idea_prompt("fintech", "sustainability")
    assert focused == "Generate a startup idea in the fintech industry focused on sustainability."


def test_parse_idea_response():
    content = json.dumps({
        "name": "GreenLedger",
        "description": "Carbon accounting for SMEs.",
        "overview": "Regulation is creating demand.",
        "factors": factor_dict(0.6),
        "explanations": {"marketSize": "Every SME must report."},
    })
    idea = parse_idea_response(content, mode=MarketTimingMode.PASS_THROUGH)
    assert idea.name == "GreenLedger"
    assert idea.factors == FactorSet.defaults(0.6)
    assert idea.score == pytest.approx(compute_score(FactorSet.defaults(0.6), MarketTimingMode.PASS_THROUGH))
    assert idea.explanations == {"marketSize": "Every SME must report."}


def test_parse_idea_requires_name():
    with pytest.raises(AnalysisParseError):
        parse_idea_response(json.dumps({"description": "nameless", "factors": {}}))


@pytest.mark.asyncio
async def test_analyze_text_short_text_skips_model():
    calls = []
    analysis = await analyze_text("Too short.", fake_completion("{}", calls), file_name="tiny.txt")
    assert calls == []
    assert not analysis.is_pitch_deck
    assert analysis.summary == INSUFFICIENT_TEXT_SUMMARY
    assert analysis.factors.is_all_zero


@pytest.mark.asyncio
async def test_analyze_text_calls_model_with_analysis_settings():
    calls = []
    response = "```json\n" + _analysis_json(0.8, isPitchDeck=True) + "\n```"
    analysis = await analyze_text(PITCH_DECK_TEXT, fake_completion(response, calls), file_name="acme.pdf")
    assert len(calls) == 1
    assert calls[0]["temperature"] == ANALYSIS_TEMPERATURE
    assert calls[0]["max_tokens"] == ANALYSIS_MAX_TOKENS
    assert "Acme Robotics" in calls[0]["prompt"]
    assert analysis.is_pitch_deck
    assert analysis.score == pytest.approx(compute_score(FactorSet.defaults(0.8)))


@pytest.mark.asyncio
async def test_generate_idea_uses_higher_temperature():
    calls = []
    response = json.dumps({"name": "Acme", "description": "d", "factors": factor_dict(0.5)})
    idea = await generate_idea(fake_completion(response, calls), industry="health")
    assert calls[0]["temperature"] == IDEA_TEMPERATURE
    assert "health industry" in calls[0]["prompt"]
    assert idea.score == pytest.approx(0.55)
