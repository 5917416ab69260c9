"""LLM prompt construction and response parsing.

Pitch deck analysis asks the model for all twelve factors plus an explicit
``isPitchDeck`` flag. A factor the model found no evidence for is scored 0,
so an all-zero set is only treated as "not a pitch deck" when the model
leaves the flag out.
"""

from __future__ import annotations

import json
import logging
import math
import re
from typing import Any, Awaitable, Optional, Protocol

from .errors import AnalysisParseError
from .models import Factor, FactorSet, MarketTimingMode, PitchDeckAnalysis, StartupIdea
from .scoring import DEFAULT_MARKET_TIMING_MODE, compute_score

logger = logging.getLogger(__name__)

MIN_TEXT_LENGTH = 50
MAX_PROMPT_CHARS = 15000

ANALYSIS_TEMPERATURE = 0.3
ANALYSIS_MAX_TOKENS = 4000
IDEA_TEMPERATURE = 0.7
IDEA_MAX_TOKENS = 2000

INSUFFICIENT_TEXT_SUMMARY = (
    "Insufficient text content was extracted from this file. "
    "The document may contain very little text or be primarily images."
)

_FACTOR_QUESTIONS = {
    Factor.MARKET_SIZE: "How large is the addressable market?",
    Factor.BARRIER_TO_ENTRY: "What barriers exist for new competitors?",
    Factor.DEFENSIBILITY: "How well can the startup defend against competition?",
    Factor.INSIGHT_FACTOR: "How unique is their core insight?",
    Factor.COMPLEXITY: "How complex is their solution (technical/implementation)?",
    Factor.RISK_FACTOR: "What is the overall risk profile?",
    Factor.TEAM_FACTOR: "How strong and experienced is the team?",
    Factor.MARKET_TIMING: "Is the market timing optimal for this solution?",
    Factor.COMPETITION_INTENSITY: "How intense is the competition?",
    Factor.CAPITAL_EFFICIENCY: "How efficiently can they convert investment into growth?",
    Factor.DISTRIBUTION_ADVANTAGE: "Do they have advantages in distribution/customer acquisition?",
    Factor.BUSINESS_MODEL_VIABILITY: "How viable is their business model?",
}

_LOWER_IS_BETTER = {Factor.RISK_FACTOR, Factor.COMPETITION_INTENSITY}

_FENCED_JSON = re.compile(r"```json\s*\n([\s\S]*?)\n\s*```")
_FENCED_ANY = re.compile(r"```\s*\n([\s\S]*?)\n\s*```")
_BARE_OBJECT = re.compile(r"(\{[\s\S]*\})")


class Completion(Protocol):
    """An LLM call: (system prompt, user prompt) -> response text."""

    def __call__(self, system: str, prompt: str, *, temperature: float, max_tokens: int) -> Awaitable[str]:
        ...


def _factor_list(hint_lower_is_better: bool = False) -> str:
    lines = []
    for index, factor in enumerate(Factor, start=1):
        line = f"{index}. {factor.value}: {_FACTOR_QUESTIONS[factor]}"
        if hint_lower_is_better:
            line += " (0-1 scale, lower is better)" if factor in _LOWER_IS_BETTER else " (0-1 scale)"
        lines.append(line)
    return "\n".join(lines)


def build_analysis_prompt(text: str, file_name: Optional[str] = None) -> tuple[str, str]:
    """Return (system, user) prompts for pitch deck factor extraction."""
    system = f"""You are an expert startup investor and pitch deck analyzer. Your task is to extract and analyze key information from a startup pitch deck.

Evaluate the document on the following parameters. For each parameter, provide a numerical score between 0 and 1, where:
- 0 means no information was provided about this parameter
- 0.1-0.3 means weak or minimal information
- 0.4-0.6 means average or adequate information
- 0.7-0.9 means strong or compelling information
- 1.0 means exceptionally strong information

Parameters to evaluate:
{_factor_list()}

IMPORTANT: If the document is NOT a startup pitch deck, or if it doesn't provide enough startup-related information to analyze, set "isPitchDeck" to false and give ALL parameters a score of 0.

Return a JSON object with these scores and a determination of whether this is a pitch deck."""

    body = text[:MAX_PROMPT_CHARS]
    if len(text) > MAX_PROMPT_CHARS:
        body += "... (truncated)"

    user = f"""Analyze this document: {body}
Filename: {file_name or 'unknown'}

Respond with a JSON object containing:
1. "isPitchDeck": boolean - whether this document is a startup pitch deck
2. "parameters": object with numerical scores (0-1) for all 12 parameters
3. "explanations": object with a brief explanation for each parameter score
4. "summary": one or two sentences summarizing the startup

If this is not a pitch deck, set all parameters to 0."""

    return system, user


def build_idea_prompt(industry: Optional[str] = None, focus: Optional[str] = None) -> tuple[str, str]:
    """Return (system, user) prompts for startup idea generation."""
    system = f"""You are an expert startup advisor with deep knowledge of venture capital, market trends, and business opportunities.
Your task is to generate innovative startup ideas that would score well on the following parameters:

{_factor_list(hint_lower_is_better=True)}

Create a detailed startup idea that would perform well across these parameters. For the idea, provide:
1. A clear startup name
2. A concise description of what the startup does
3. A brief explanation of why this idea would score well
4. Specific scores for each of the 12 parameters (on a 0-1 scale)
5. A short explanation for each parameter score

Format your response as a valid JSON object with these fields:
- name: string (startup name)
- description: string (description of the startup)
- overview: string (explanation of why this idea would score well)
- factors: object (with each parameter as a key and its score as a numeric value)
- explanations: object (with each parameter as a key and its explanation as a string value)"""

    industry = industry if industry and industry.lower() != "any" else None
    focus = focus if focus and focus.lower() != "any" else None
    if industry or focus:
        user = "Generate a startup idea"
        if industry:
            user += f" in the {industry} industry"
        if focus:
            user += f" focused on {focus}"
        user += "."
    else:
        user = "Generate an innovative startup idea that would score well across all the evaluation parameters."

    return system, user


def extract_json(content: str) -> dict:
    """Pull a JSON object out of an LLM response.

    Tries a ```json fence, then any fence, then the outermost braces, then
    the raw content.
    """
    for pattern in (_FENCED_JSON, _FENCED_ANY, _BARE_OBJECT):
        match = pattern.search(content)
        if match:
            candidate = match.group(1)
            break
    else:
        candidate = content

    try:
        data = json.loads(candidate)
    except json.JSONDecodeError as exc:
        raise AnalysisParseError(f"Could not parse JSON from model response: {exc}") from exc

    if not isinstance(data, dict):
        raise AnalysisParseError(f"Expected a JSON object, got {type(data).__name__}")
    return data


def _coerce_unit(value: Any) -> float:
    """Model output to [0, 1]; anything unusable counts as no evidence (0)."""
    if isinstance(value, bool):
        return 0.0
    try:
        number = float(value)
    except (TypeError, ValueError):
        return 0.0
    if not math.isfinite(number):
        return 0.0
    return min(1.0, max(0.0, number))


def _coerce_bool(value: Any) -> Optional[bool]:
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in ("true", "yes", "1"):
            return True
        if lowered in ("false", "no", "0"):
            return False
    return None


def factors_from_response(values: Any) -> FactorSet:
    """Build a FactorSet from a model's parameter object.

    Accepts camelCase or snake_case keys, ignores unknown keys, and scores
    missing or unusable values as 0.
    """
    if not isinstance(values, dict):
        values = {}
    resolved = {}
    for factor in Factor:
        raw = values.get(factor.value, values.get(factor.attr))
        resolved[factor.value] = _coerce_unit(raw)
    return FactorSet.model_validate(resolved)


def _explanations(data: dict) -> tuple[dict[str, str], str]:
    explanations = data.get("explanations", data.get("explanation"))
    summary = data.get("summary") or ""
    if isinstance(explanations, str):
        return {}, summary or explanations
    if not isinstance(explanations, dict):
        return {}, summary

    result = {}
    for key, text in explanations.items():
        try:
            name = Factor.parse(key).value
        except ValueError:
            name = str(key)
        result[name] = str(text)
    return result, summary


def parse_analysis_response(
    content: str,
    file_name: Optional[str] = None,
    mode: MarketTimingMode = DEFAULT_MARKET_TIMING_MODE,
) -> PitchDeckAnalysis:
    """Parse a pitch deck analysis response into a PitchDeckAnalysis."""
    data = extract_json(content)
    factors = factors_from_response(data.get("parameters", data.get("factors")))
    explanations, summary = _explanations(data)

    is_pitch_deck = _coerce_bool(data.get("isPitchDeck", data.get("is_pitch_deck")))
    if is_pitch_deck is None:
        is_pitch_deck = not factors.is_all_zero

    if not is_pitch_deck:
        summary = summary or "This document does not appear to be a startup pitch deck."

    return PitchDeckAnalysis(
        is_pitch_deck=is_pitch_deck,
        factors=factors,
        explanations=explanations,
        summary=summary,
        score=compute_score(factors, mode) if is_pitch_deck else None,
        file_name=file_name,
    )


def parse_idea_response(
    content: str,
    mode: MarketTimingMode = DEFAULT_MARKET_TIMING_MODE,
) -> StartupIdea:
    """Parse a startup idea response into a StartupIdea."""
    data = extract_json(content)
    name = data.get("name")
    if not name:
        raise AnalysisParseError("Startup idea response is missing a name")

    factors = factors_from_response(data.get("factors", data.get("parameters")))
    explanations, _ = _explanations(data)
    return StartupIdea(
        name=str(name),
        description=str(data.get("description") or ""),
        overview=str(data.get("overview") or ""),
        factors=factors,
        explanations=explanations,
        score=compute_score(factors, mode),
    )


def insufficient_text_analysis(file_name: Optional[str] = None) -> PitchDeckAnalysis:
    return PitchDeckAnalysis(
        is_pitch_deck=False,
        factors=FactorSet.defaults(0.0),
        summary=INSUFFICIENT_TEXT_SUMMARY,
        file_name=file_name,
    )


async def analyze_text(
    text: str,
    complete: Completion,
    file_name: Optional[str] = None,
    mode: MarketTimingMode = DEFAULT_MARKET_TIMING_MODE,
) -> PitchDeckAnalysis:
    """Run factor extraction on document text.

    Short documents are rejected without calling the model.
    """
    if len(text.strip()) < MIN_TEXT_LENGTH:
        logger.info("Insufficient text for analysis of %s: %d characters", file_name or "document", len(text.strip()))
        return insufficient_text_analysis(file_name)

    system, prompt = build_analysis_prompt(text, file_name)
    logger.info("Processing analysis request for file: %s", file_name or "unknown")
    content = await complete(system, prompt, temperature=ANALYSIS_TEMPERATURE, max_tokens=ANALYSIS_MAX_TOKENS)
    return parse_analysis_response(content, file_name=file_name, mode=mode)


async def generate_idea(
    complete: Completion,
    industry: Optional[str] = None,
    focus: Optional[str] = None,
    mode: MarketTimingMode = DEFAULT_MARKET_TIMING_MODE,
) -> StartupIdea:
    """Ask the model for a startup idea and score it."""
    system, prompt = build_idea_prompt(industry, focus)
    logger.info("Generating startup idea with prompt: %s", prompt)
    content = await complete(system, prompt, temperature=IDEA_TEMPERATURE, max_tokens=IDEA_MAX_TOKENS)
    return parse_idea_response(content, mode=mode)
