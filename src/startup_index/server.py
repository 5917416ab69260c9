"""Startup Success Index MCP App Server.

FastMCP server exposing the scoring engine, the example library, pitch deck
analysis, idea generation and saved startups as tools, plus an MCP Apps UI.
Run: startup-index-mcp
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from pathlib import Path
from typing import AsyncIterator, Optional

from mcp.server.fastmcp import FastMCP
from mcp.types import ToolAnnotations

from . import get_app_html, store
from .config import LLMProvider, get_settings
from .core.analysis import MIN_TEXT_LENGTH, Completion, analyze_text, generate_idea, insufficient_text_analysis
from .core.clients import anthropic, openai
from .core.descriptions import BAND_TEXT, BAND_UPPER_BOUNDS, FACTOR_LABELS, FACTOR_TOOLTIPS, explain_factor
from .core.errors import ConfigurationError, DocumentValidationError, UsageLimitError
from .core.examples import DEFAULT_FACTORS, list_examples
from .core.extraction import extract_text
from .core.models import ExampleRegion, Factor, FactorSet, MarketTimingMode, StartupCategory, StartupRecord
from .core.scoring import COMPLEMENTED_FACTORS, FACTOR_WEIGHTS, SCORE_DIVISOR, compute_score, score_startup
from .db import close_db, init_db

logger = logging.getLogger(__name__)

MCP_APP_MIME = "text/html;profile=mcp-app"

READ_ONLY = ToolAnnotations(readOnlyHint=True, destructiveHint=False, idempotentHint=True, openWorldHint=False)
LLM_CALL = ToolAnnotations(readOnlyHint=False, destructiveHint=False, idempotentHint=False, openWorldHint=True)
WRITE = ToolAnnotations(readOnlyHint=False, destructiveHint=False, idempotentHint=False, openWorldHint=False)
DESTRUCTIVE = ToolAnnotations(readOnlyHint=False, destructiveHint=True, idempotentHint=True, openWorldHint=False)


@asynccontextmanager
async def lifespan(server: FastMCP) -> AsyncIterator[None]:
    """Initialize the local database for saved startups."""
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(name)s %(levelname)s %(message)s")
    await init_db()
    try:
        yield
    finally:
        await close_db()


mcp = FastMCP(
    "Startup Success Index",
    instructions="Score startups on the Startup Success Index (SSI). Adjust twelve weighted factors by hand, browse example startups, or extract factors from a pitch deck with an LLM, and keep a history of saved startups.",
    lifespan=lifespan,
)


def _mode(market_timing_mode: str = "") -> MarketTimingMode:
    if not market_timing_mode:
        return get_settings().market_timing_mode
    return MarketTimingMode(market_timing_mode.lower())


def _score_payload(factors: FactorSet, mode: MarketTimingMode) -> dict:
    result = score_startup(factors, mode)
    return {
        "score": round(result.score, 4),
        "tier": result.tier.value,
        "interpretation": result.interpretation,
        "description": result.description,
        "market_timing_mode": mode.value,
        "weighted_sum": round(result.weighted_sum, 4),
        "contributions": [
            {
                "factor": c.factor.value,
                "label": FACTOR_LABELS[c.factor],
                "value": c.value,
                "adjusted_value": round(c.adjusted_value, 4),
                "weight": c.weight,
                "contribution": round(c.contribution, 4),
                "band_text": explain_factor(c.factor, c.value).band_text,
            }
            for c in result.contributions
        ],
    }


def _record_to_dict(record: StartupRecord) -> dict:
    return record.model_dump(mode="json", by_alias=True)


@asynccontextmanager
async def _llm_completion(user_id: str, api_key: str) -> AsyncIterator[Completion]:
    """Pick the API key for an LLM call and yield a completion function.

    A caller-supplied key always wins. Otherwise the server key is used if a
    free analysis can be reserved for the caller. The reservation is released
    when the body raises, so only completed analyses are counted.
    """
    settings = get_settings()
    charge_user = None

    key = api_key.strip()
    if not key:
        key = settings.server_api_key() or ""
        if not key:
            raise ConfigurationError(
                f"No API key available. Pass api_key or set the {settings.llm_provider.value.upper()}_API_KEY environment variable."
            )
        if not user_id:
            raise UsageLimitError("Please pass a user_id to use the free analyses, or provide your own API key.")
        if not await store.reserve_free_analysis(user_id, settings.free_analyses_limit):
            raise UsageLimitError("You have used all your free analyses. Please provide your own API key to continue.")
        charge_user = user_id

    if settings.llm_provider is LLMProvider.OPENAI:
        client, model = openai, settings.openai_model
    else:
        client, model = anthropic, settings.anthropic_model

    async def complete(system: str, prompt: str, *, temperature: float, max_tokens: int) -> str:
        return await client.complete(key, system, prompt, model=model, temperature=temperature, max_tokens=max_tokens)

    try:
        yield complete
    except BaseException:
        if charge_user:
            await store.release_free_analysis(charge_user)
        raise


# ─── MCP Apps UI Resource ─────────────────────────────────────────────────────

APP_RESOURCE_URI = "ui://startup-index/app"


@mcp.resource(
    APP_RESOURCE_URI,
    mime_type=MCP_APP_MIME,
)
def app_ui() -> str:
    """Startup Success Index: calculator, examples, pitch deck analysis, saved startups."""
    return get_app_html()


# ─── Tool 1: Score ───────────────────────────────────────────────────────────


@mcp.tool(annotations=READ_ONLY)
async def ssi_score(factors: dict, market_timing_mode: str = "", fill_missing: bool = True) -> dict:
    """Compute the Startup Success Index for a set of factors.

    Args:
        factors: Mapping of factor name (camelCase or snake_case) to a value
                 between 0 and 1. Values outside [0, 1] are clamped.
        market_timing_mode: 'piecewise' or 'pass_through'. Defaults to the server setting.
        fill_missing: Fill omitted factors with 0.5. If false, all twelve are required.
    """
    mode = _mode(market_timing_mode)
    factor_set = FactorSet.from_mapping(factors, fill=0.5 if fill_missing else None)
    payload = _score_payload(factor_set, mode)
    return {
        "title": "Startup Success Index",
        "factors": factor_set.to_wire(),
        **payload,
        "summary": f"SSI {payload['score']:.2f}: {payload['interpretation']}. {payload['description']}",
    }


# ─── Tool 2: Describe Factor ─────────────────────────────────────────────────


@mcp.tool(annotations=READ_ONLY)
async def ssi_describe_factor(factor: str, value: float) -> dict:
    """Label, tooltip and qualitative description for one factor at a value.

    Args:
        factor: Factor name, e.g. 'marketSize' or 'market_size'.
        value: Factor value between 0 and 1.
    """
    description = explain_factor(factor, value)
    return {
        **description.model_dump(mode="json"),
        "summary": f"{description.label} at {value:.2f}: {description.band_text}. {description.description}",
    }


# ─── Tool 3: Factor Catalog ──────────────────────────────────────────────────


@mcp.tool(annotations=READ_ONLY)
async def ssi_factor_catalog() -> dict:
    """All twelve factors with weights, direction, tooltips and value bands."""
    factors = []
    for factor in Factor:
        factors.append({
            "factor": factor.value,
            "label": FACTOR_LABELS[factor],
            "tooltip": FACTOR_TOOLTIPS[factor],
            "weight": FACTOR_WEIGHTS[factor],
            "higher_is_better": factor not in COMPLEMENTED_FACTORS and factor is not Factor.MARKET_TIMING,
            "bands": [
                {"max_value": upper, "text": text}
                for upper, text in zip(list(BAND_UPPER_BOUNDS) + [1.0], BAND_TEXT[factor])
            ],
        })
    return {
        "title": "SSI Factors",
        "factors": factors,
        "divisor": SCORE_DIVISOR,
        "default_factors": DEFAULT_FACTORS.to_wire(),
        "summary": f"{len(factors)} factors. Score = clamp(sum(weight x adjusted value) / {SCORE_DIVISOR}, 0, 1).",
    }


# ─── Tool 4: Examples ────────────────────────────────────────────────────────


@mcp.tool(annotations=READ_ONLY)
async def ssi_examples(region: str = "", category: str = "", market_timing_mode: str = "") -> dict:
    """Preset example startups with their factors and scores.

    Args:
        region: 'global' or 'indian'. Empty for both.
        category: 'unicorn', 'medium' or 'failed'. Empty for all.
        market_timing_mode: 'piecewise' or 'pass_through'. Defaults to the server setting.
    """
    mode = _mode(market_timing_mode)
    examples = list_examples(
        region=ExampleRegion(region.lower()) if region else None,
        category=StartupCategory(category.lower()) if category else None,
    )
    results = [
        {
            "name": e.name,
            "description": e.description,
            "category": e.category.value,
            "region": e.region.value,
            "factors": e.factors.to_wire(),
            "score": round(compute_score(e.factors, mode), 4),
            "reference_score": e.reference_score,
        }
        for e in examples
    ]
    return {
        "title": "Example Startups",
        "examples": results,
        "count": len(results),
        "market_timing_mode": mode.value,
        "summary": f"{len(results)} example startups" + (f" ({region})" if region else "") + (f" in category '{category}'" if category else "") + ".",
    }


# ─── Tool 5: Analyze Pitch Deck ──────────────────────────────────────────────


@mcp.tool(annotations=LLM_CALL)
async def ssi_analyze_pitch_deck(
    file_path: str = "",
    text: str = "",
    file_name: str = "",
    user_id: str = "",
    api_key: str = "",
    save: bool = False,
    startup_name: str = "",
    market_timing_mode: str = "",
) -> dict:
    """Extract the twelve factors from a pitch deck with an LLM and score it.

    Args:
        file_path: Path to a pitch deck: PDF (scanned decks are OCR'd), image, .docx or .txt. Either this or text is required.
        text: Pitch deck text, if already extracted.
        file_name: Display name for the document. Defaults to the file's name.
        user_id: Caller id, used for free analysis accounting and saving.
        api_key: Your own LLM API key. Without it, free analyses are used.
        save: Save the result as a startup for user_id.
        startup_name: Name to save under. Defaults to the document name.
        market_timing_mode: 'piecewise' or 'pass_through'. Defaults to the server setting.
    """
    mode = _mode(market_timing_mode)

    if file_path:
        path = Path(file_path).expanduser()
        if not path.is_file():
            raise DocumentValidationError(f"File not found: {file_path}")
        file_name = file_name or path.name
        text = extract_text(path.read_bytes(), file_name)
    elif not text:
        raise DocumentValidationError("Provide either file_path or text")

    if len(text.strip()) < MIN_TEXT_LENGTH:
        analysis = insufficient_text_analysis(file_name or None)
    else:
        async with _llm_completion(user_id, api_key) as complete:
            analysis = await analyze_text(text, complete, file_name=file_name or None, mode=mode)
        analysis.provider = get_settings().llm_provider.value

    saved = None
    if save and analysis.is_pitch_deck:
        if not user_id:
            raise ValueError("user_id is required to save the analysis")
        name = startup_name or Path(file_name or "Untitled startup").stem
        record = await store.create_startup(
            user_id, name, analysis.factors,
            description=analysis.summary or None, scored_manually=False, mode=mode,
        )
        await store.record_pitch_deck(record.id, file_name or name, analysis)
        saved = _record_to_dict(record)

    if analysis.is_pitch_deck:
        summary = f"Pitch deck scored {analysis.score:.2f}. {analysis.summary}".strip()
    else:
        summary = analysis.summary

    return {
        "title": "Pitch Deck Analysis",
        "is_pitch_deck": analysis.is_pitch_deck,
        "factors": analysis.factors.to_wire(),
        "explanations": analysis.explanations,
        "score": _score_payload(analysis.factors, mode) if analysis.is_pitch_deck else None,
        "saved_startup": saved,
        "summary": summary,
    }


# ─── Tool 6: Generate Idea ───────────────────────────────────────────────────


@mcp.tool(annotations=LLM_CALL)
async def ssi_generate_idea(
    industry: str = "",
    focus: str = "",
    user_id: str = "",
    api_key: str = "",
    market_timing_mode: str = "",
) -> dict:
    """Generate a startup idea designed to score well, with suggested factors.

    Args:
        industry: Optional industry, e.g. 'fintech'. 'any' or empty for no constraint.
        focus: Optional focus, e.g. 'sustainability'.
        user_id: Caller id, used for free analysis accounting.
        api_key: Your own LLM API key. Without it, free analyses are used.
        market_timing_mode: 'piecewise' or 'pass_through'. Defaults to the server setting.
    """
    mode = _mode(market_timing_mode)
    async with _llm_completion(user_id, api_key) as complete:
        idea = await generate_idea(complete, industry=industry or None, focus=focus or None, mode=mode)

    return {
        "title": idea.name,
        "idea": idea.model_dump(mode="json", by_alias=True),
        "score": _score_payload(idea.factors, mode),
        "summary": f"{idea.name}: {idea.description} (SSI {idea.score:.2f})",
    }


# ─── Tool 7-13: Saved Startups ───────────────────────────────────────────────


@mcp.tool(annotations=WRITE)
async def ssi_save_startup(
    user_id: str,
    name: str,
    factors: dict,
    description: str = "",
    market_timing_mode: str = "",
) -> dict:
    """Save a startup with its factors. The score is computed from the factors.

    Args:
        user_id: Owner of the saved startup.
        name: Startup name.
        factors: All twelve factor values (camelCase or snake_case keys).
        description: Optional description.
        market_timing_mode: 'piecewise' or 'pass_through'. Defaults to the server setting.
    """
    mode = _mode(market_timing_mode)
    record = await store.create_startup(user_id, name, FactorSet.from_mapping(factors), description=description or None, mode=mode)
    return {
        "title": "Startup Saved",
        "startup": _record_to_dict(record),
        "summary": f"Saved {record.name} with SSI {record.score:.2f}.",
    }


@mcp.tool(annotations=READ_ONLY)
async def ssi_list_startups(user_id: str) -> dict:
    """List a user's saved startups, newest first.

    Args:
        user_id: Owner of the saved startups.
    """
    records = await store.list_startups(user_id)
    return {
        "title": "My Startups",
        "startups": [_record_to_dict(r) for r in records],
        "count": len(records),
        "summary": f"{len(records)} saved startup(s)." if records else "No saved startups yet.",
    }


@mcp.tool(annotations=READ_ONLY)
async def ssi_get_startup(startup_id: str, market_timing_mode: str = "") -> dict:
    """A saved startup with its score breakdown.

    Args:
        startup_id: Id returned when the startup was saved.
        market_timing_mode: Mode for the breakdown. Defaults to the server setting.
    """
    record = await store.get_startup(startup_id)
    breakdown = _score_payload(record.factors, _mode(market_timing_mode))
    summary = f"{record.name}: SSI {record.score:.2f}"
    if record.manually_edited:
        summary += f" (manually edited; computed score {breakdown['score']:.2f})"
    return {
        "title": record.name,
        "startup": _record_to_dict(record),
        "breakdown": breakdown,
        "summary": summary + ".",
    }


@mcp.tool(annotations=WRITE)
async def ssi_update_startup(
    startup_id: str,
    factors: Optional[dict] = None,
    name: str = "",
    description: Optional[str] = None,
    market_timing_mode: str = "",
) -> dict:
    """Rename, redescribe or change factors of a saved startup.

    Only a change of factors rescores the startup and clears a manual score
    override. A rename or new description keeps the current score.

    Args:
        startup_id: Id of the saved startup.
        factors: Factors to change. Omitted factors keep their current values.
        name: New name, if renaming.
        description: New description, if changing.
        market_timing_mode: 'piecewise' or 'pass_through'. Defaults to the server setting.
    """
    current = await store.get_startup(startup_id)
    updated = None
    if factors:
        updated = current.factors
        for key, value in factors.items():
            updated = updated.with_factor(key, value)

    record = await store.update_startup(
        startup_id, updated, name=name or None, description=description, mode=_mode(market_timing_mode),
    )
    return {
        "title": "Startup Updated",
        "startup": _record_to_dict(record),
        "previous_score": current.score,
        "summary": f"{record.name}: SSI {current.score:.2f} -> {record.score:.2f}.",
    }


@mcp.tool(annotations=WRITE)
async def ssi_override_score(startup_id: str, score: float) -> dict:
    """Hand-edit a saved startup's score. Marks it as manually edited.

    Args:
        startup_id: Id of the saved startup.
        score: New score between 0 and 1 (clamped).
    """
    record = await store.override_score(startup_id, score)
    return {
        "title": "Score Overridden",
        "startup": _record_to_dict(record),
        "summary": f"{record.name}: score manually set to {record.score:.2f}.",
    }


@mcp.tool(annotations=DESTRUCTIVE)
async def ssi_delete_startup(startup_id: str) -> dict:
    """Delete a saved startup and its history.

    Args:
        startup_id: Id of the saved startup.
    """
    record = await store.get_startup(startup_id)
    await store.delete_startup(startup_id)
    return {
        "title": "Startup Deleted",
        "startup_id": startup_id,
        "summary": f"Deleted {record.name}.",
    }


@mcp.tool(annotations=READ_ONLY)
async def ssi_score_history(startup_id: str) -> dict:
    """How a saved startup's score has changed over time.

    Args:
        startup_id: Id of the saved startup.
    """
    history = await store.get_score_history(startup_id)
    entries = [h.model_dump(mode="json", by_alias=True) for h in history]
    if len(history) >= 2:
        delta = history[-1].score - history[0].score
        summary = f"{len(history)} snapshots. Score moved {delta:+.2f} since it was first saved."
    else:
        summary = f"{len(history)} snapshot(s)."
    return {
        "title": "Score History",
        "history": entries,
        "count": len(entries),
        "summary": summary,
    }


# ─── Tool 14: Open MCP App (Interactive UI) ──────────────────────────────────


@mcp.tool(annotations=READ_ONLY, meta={"ui": {"resourceUri": APP_RESOURCE_URI}})
async def open_startup_index_app(user_id: str = "") -> dict:
    """Open the Startup Success Index app: calculator, examples, pitch deck analysis, and saved startups.

    Args:
        user_id: Optional caller id, to include saved startups and free analysis status.
    """
    settings = get_settings()
    mode = settings.market_timing_mode
    payload = {
        "title": "Startup Success Index",
        "default_factors": DEFAULT_FACTORS.to_wire(),
        "default_score": _score_payload(DEFAULT_FACTORS, mode),
        "example_count": len(list_examples()),
        "market_timing_mode": mode.value,
        "summary": "Adjust the twelve factors, load an example, or analyze a pitch deck.",
    }
    if user_id:
        records = await store.list_startups(user_id)
        usage = await store.get_free_usage(user_id, settings.free_analyses_limit)
        payload["startups"] = [_record_to_dict(r) for r in records]
        payload["free_analyses_remaining"] = usage.remaining
    return payload


def main():
    """Entry point for the CLI command."""
    mcp.run()


if __name__ == "__main__":
    main()
