"""Environment-driven settings.

API keys and limits are read once into a Settings object and passed to the
code that needs them, rather than looked up ad hoc.
"""

from __future__ import annotations

import os
from enum import Enum
from functools import lru_cache
from typing import Optional

from pydantic import BaseModel, Field

from .core.clients import anthropic, openai
from .core.errors import ConfigurationError
from .core.models import MarketTimingMode

DEFAULT_DATA_DIR = os.path.expanduser("~/.startup-index")
DEFAULT_FREE_ANALYSES_LIMIT = 3


class LLMProvider(str, Enum):
    ANTHROPIC = "anthropic"
    OPENAI = "openai"


class Settings(BaseModel):
    """Server configuration."""

    anthropic_api_key: Optional[str] = None
    openai_api_key: Optional[str] = None
    llm_provider: LLMProvider = LLMProvider.ANTHROPIC
    anthropic_model: str = anthropic.DEFAULT_MODEL
    openai_model: str = openai.DEFAULT_MODEL
    free_analyses_limit: int = Field(DEFAULT_FREE_ANALYSES_LIMIT, ge=0)
    market_timing_mode: MarketTimingMode = MarketTimingMode.PIECEWISE
    data_dir: str = DEFAULT_DATA_DIR

    @classmethod
    def from_env(cls) -> "Settings":
        env = os.environ
        try:
            return cls(
                anthropic_api_key=env.get("ANTHROPIC_API_KEY") or env.get("CLAUDE_API_KEY") or None,
                openai_api_key=env.get("OPENAI_API_KEY") or None,
                llm_provider=env.get("SSI_LLM_PROVIDER", LLMProvider.ANTHROPIC.value).lower(),
                anthropic_model=env.get("SSI_ANTHROPIC_MODEL", anthropic.DEFAULT_MODEL),
                openai_model=env.get("SSI_OPENAI_MODEL", openai.DEFAULT_MODEL),
                free_analyses_limit=int(env.get("SSI_FREE_ANALYSES_LIMIT", str(DEFAULT_FREE_ANALYSES_LIMIT))),
                market_timing_mode=env.get("SSI_MARKET_TIMING_MODE", MarketTimingMode.PIECEWISE.value).lower(),
                data_dir=env.get("DATA_DIR", DEFAULT_DATA_DIR),
            )
        except ValueError as exc:
            raise ConfigurationError(f"Invalid configuration: {exc}") from exc

    def server_api_key(self) -> Optional[str]:
        """The server's own key for the configured provider, if any."""
        if self.llm_provider is LLMProvider.OPENAI:
            return self.openai_api_key
        return self.anthropic_api_key


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings.from_env()
