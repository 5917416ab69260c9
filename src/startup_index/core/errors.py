"""Exception hierarchy shared by the core and the server."""

from __future__ import annotations


class StartupIndexError(Exception):
    """Base class for all Startup Success Index errors."""


class InvalidFactorError(StartupIndexError, ValueError):
    """A factor value is missing, non-numeric or not finite."""


class UnknownFactorError(StartupIndexError, ValueError):
    """A factor name is not one of the twelve known factors."""


class ExampleNotFoundError(StartupIndexError, LookupError):
    """No preset example startup has the requested name."""


class DocumentValidationError(StartupIndexError, ValueError):
    """An uploaded document cannot be analyzed."""


class AnalysisParseError(StartupIndexError, ValueError):
    """An LLM response could not be parsed into factors."""


class LLMProviderError(StartupIndexError):
    """The LLM provider returned an error or an unusable response."""


class UsageLimitError(StartupIndexError):
    """The caller has exhausted their free analyses and supplied no API key."""


class ConfigurationError(StartupIndexError, ValueError):
    """A required setting is missing or invalid."""


class StartupNotFoundError(StartupIndexError, LookupError):
    """No saved startup has the requested id."""
