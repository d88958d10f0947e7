"""
Error Taxonomy
===============
Exceptions shared between the provider layer, the session and the
entry point.

Recovery policy:
  - ProviderError / RateLimitedError → recovered by ProviderManager
    (move on to the next provider).
  - AllProvidersFailedError → surfaced to the user; fatal for the turn.
  - UserAbortError → unwinds to main() and ends the process cleanly.
  - ConfigError → printed by main() with a hint; exit code 1.
"""

from __future__ import annotations


class AiAssistError(Exception):
    """Base class for all aiassist errors."""


class ConfigError(AiAssistError):
    """Configuration is missing or unusable."""


class ProviderError(AiAssistError):
    """A single provider call failed. The provider stays eligible."""

    def __init__(self, provider_key: str, message: str) -> None:
        super().__init__(f"{provider_key}: {message}")
        self.provider_key = provider_key


class RateLimitedError(ProviderError):
    """HTTP 429; the provider is disabled for the rest of the process."""


class AllProvidersFailedError(AiAssistError):
    """Every registered, available provider failed for one call."""

    def __init__(self, message: str, last_error: Exception | None = None) -> None:
        if last_error is not None:
            message = f"{message}: {last_error}"
        super().__init__(message)
        self.last_error = last_error


class UserAbortError(AiAssistError):
    """User interrupted (Ctrl+C, EOF, 'exit') or the session was cancelled."""
