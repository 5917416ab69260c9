"""Startup Success Index MCP App Server.

Score startups on twelve weighted factors, from sliders, preset examples,
or an LLM reading of a pitch deck, and track saved startups over time.
"""

__version__ = "0.1.0"

from .app_definition import StartupIndexApp


def get_app_html() -> str:
    """Return the MCP App HTML content. Re-renders each call for hot reload."""
    return StartupIndexApp().render()
