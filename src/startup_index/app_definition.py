"""Startup Success Index MCP App: pure Python config, no custom JS/CSS."""

from mcpbundles_app_ui import App, Card, DarkTheme


class StartupIndexApp(App):
    """Interactive SSI calculator: tabbed engine and views from library."""

    name = "Startup Success Index"
    subtitle = "Twelve weighted factors, one score from 0 to 1"
    theme = DarkTheme(
        accent="#8b5cf6",
        bg_page="#0f172a",
        bg_card="#1e293b",
        bg_hover="#253048",
        text_primary="#f1f5f9",
        text_secondary="#e2e8f0",
        text_muted="#94a3b8",
        border="#334155",
        success="#10b981",
        warning="#f59e0b",
        error="#ef4444",
        chart_colors=[
            "#8b5cf6", "#3b82f6", "#10b981", "#f59e0b",
            "#ef4444", "#06b6d4", "#f97316", "#ec4899",
            "#14b8a6", "#a855f7", "#84cc16", "#eab308",
        ],
    )

    layout = [Card(title="")]

    tool_name = "open_startup_index_app"
    tabs = [
        {"id": "overview", "label": "Overview", "tool": "open_startup_index_app", "type": "dashboard"},
        {
            "id": "calculator", "label": "Calculator", "tool": "ssi_score", "type": "dashboard",
            "needsArgs": True,
            "promptTitle": "Score a startup on the twelve SSI factors",
            "promptHint": 'Ask your AI, e.g. "score a startup with a huge market and a weak team"',
        },
        {"id": "factors", "label": "Factors", "tool": "ssi_factor_catalog", "type": "dashboard"},
        {"id": "examples", "label": "Examples", "tool": "ssi_examples", "type": "dashboard"},
        {
            "id": "analyze", "label": "Pitch Deck", "tool": "ssi_analyze_pitch_deck", "type": "dashboard",
            "needsArgs": True,
            "promptTitle": "Score a pitch deck",
            "promptHint": 'Ask your AI, e.g. "analyze ~/decks/acme.pdf"',
        },
        {
            "id": "ideas", "label": "Ideas", "tool": "ssi_generate_idea", "type": "dashboard",
            "needsArgs": True,
            "promptTitle": "Generate a startup idea that scores well",
            "promptHint": 'Ask your AI, e.g. "give me a fintech idea focused on sustainability"',
        },
        {
            "id": "startups", "label": "My Startups", "tool": "ssi_list_startups", "type": "dashboard",
            "needsArgs": True,
            "promptTitle": "Your saved startups",
            "promptHint": 'Ask your AI, e.g. "list my saved startups"',
        },
        {"id": "tools", "label": "Tools", "tool": None, "type": "tools"},
    ]
    footer_text = "Startup Success Index · 12 factors · score 0–1"

    tool_catalog_intro = (
        "This server provides <strong>14 tools</strong> your AI can call directly. "
        "One opens this interactive app, 4 score and explain factors locally, 2 call an LLM "
        "(your own API key, or a few free analyses), and 7 manage <strong>saved startups</strong> "
        "with score history in a local database. "
        "Factor names accept camelCase (<code>marketSize</code>) or snake_case (<code>market_size</code>)."
    )
    tool_catalog = [
        {"name": "open_startup_index_app", "label": "Open SSI App", "icon": "\U0001f680", "desc": "Opens this interactive app with the default factors, examples, and your saved startups.", "usage": 'open_startup_index_app(user_id="")', "source": "Local"},
        {"name": "ssi_score", "label": "Score", "icon": "\U0001f4ca", "desc": "Compute the SSI for a set of factors, with per-factor contributions and a viability tier.", "usage": 'ssi_score(factors={"marketSize": 0.8, "teamExperience": 0.6})', "source": "Local"},
        {"name": "ssi_describe_factor", "label": "Describe Factor", "icon": "\U0001f4ac", "desc": "Label, tooltip and qualitative description of one factor at a value.", "usage": 'ssi_describe_factor(factor="burnRate", value=0.7)', "source": "Local"},
        {"name": "ssi_factor_catalog", "label": "Factor Catalog", "icon": "\U0001f4cb", "desc": "All twelve factors with weights, direction and value bands.", "usage": "ssi_factor_catalog()", "source": "Local"},
        {"name": "ssi_examples", "label": "Examples", "icon": "\U0001f984", "desc": "Preset global and Indian startups: unicorns, medium successes and failures.", "usage": 'ssi_examples(region="indian", category="failed")', "source": "Local"},
        {"name": "ssi_analyze_pitch_deck", "label": "Analyze Pitch Deck", "icon": "\U0001f4c4", "desc": "Extract the twelve factors from a PDF, image, Word or text pitch deck with an LLM, score it, and optionally save it.", "usage": 'ssi_analyze_pitch_deck(file_path="deck.pdf", user_id="me", save=True)', "source": "Anthropic / OpenAI", "stateful": True},
        {"name": "ssi_generate_idea", "label": "Generate Idea", "icon": "\U0001f4a1", "desc": "Generate a startup idea designed to score well, with suggested factors.", "usage": 'ssi_generate_idea(industry="fintech", focus="sustainability")', "source": "Anthropic / OpenAI"},
        {"name": "ssi_save_startup", "label": "Save Startup", "icon": "\U0001f4be", "desc": "Save a startup with its factors and computed score.", "usage": 'ssi_save_startup(user_id="me", name="Acme", factors={...})', "source": "Local SQLite", "stateful": True},
        {"name": "ssi_list_startups", "label": "My Startups", "icon": "\U0001f4c1", "desc": "Your saved startups, newest first.", "usage": 'ssi_list_startups(user_id="me")', "source": "Local SQLite", "stateful": True},
        {"name": "ssi_get_startup", "label": "Get Startup", "icon": "\U0001f50e", "desc": "A saved startup with its score breakdown.", "usage": 'ssi_get_startup(startup_id="...")', "source": "Local SQLite", "stateful": True},
        {"name": "ssi_update_startup", "label": "Update Startup", "icon": "✏️", "desc": "Rename a saved startup or change some of its factors. Only factor changes rescore it.", "usage": 'ssi_update_startup(startup_id="...", factors={"teamFactor": 0.8})', "source": "Local SQLite", "stateful": True},
        {"name": "ssi_override_score", "label": "Override Score", "icon": "\U0001f58a️", "desc": "Hand-edit a saved startup's score. Marked as manually edited until the factors change.", "usage": 'ssi_override_score(startup_id="...", score=0.7)', "source": "Local SQLite", "stateful": True},
        {"name": "ssi_delete_startup", "label": "Delete Startup", "icon": "\U0001f5d1️", "desc": "Delete a saved startup and its history.", "usage": 'ssi_delete_startup(startup_id="...")', "source": "Local SQLite", "stateful": True},
        {"name": "ssi_score_history", "label": "Score History", "icon": "\U0001f4c9", "desc": "Every score change of a saved startup, oldest first.", "usage": 'ssi_score_history(startup_id="...")', "source": "Local SQLite", "stateful": True},
    ]
