"""
LLM Providers: OpenAI-Compatible Client & Fallback Caller
==========================================================
Talks to chat-completion backends and picks the first one that answers.

Architecture:
  - ModelProvider:            Abstract provider contract (capability-based).
  - OpenAICompatibleProvider: HTTP client for any /chat/completions API.
  - ProviderManager:          Ordered registry + call-with-fallback.

Fallback rules:
  1. Providers are tried strictly in registration (= configuration) order.
  2. The first non-error response wins; a provider is never retried
     within one call.
  3. HTTP 429 marks the provider unavailable for the rest of the process.
  4. Any other failure only skips the provider for the current call.
  5. The cancellation event is checked before each provider attempt.
"""

from __future__ import annotations

import asyncio
import logging
import threading
from abc import ABC, abstractmethod
from collections.abc import Callable
from dataclasses import dataclass
from typing import Literal

import httpx
from pydantic import BaseModel, Field

from aiassist.config_loader import AppConfig
from aiassist.errors import (
    AllProvidersFailedError,
    ProviderError,
    RateLimitedError,
    UserAbortError,
)

logger = logging.getLogger(__name__)

# Total request timeout; AI APIs may take long before sending headers
DEFAULT_REQUEST_TIMEOUT: float = 120.0


# ============================================================
#  WIRE MODELS (OpenAI chat-completion protocol)
# ============================================================

class ChatMessage(BaseModel):
    """One message in a chat-completion request."""
    role: Literal["system", "user", "assistant"]
    content: str


class ChatCompletionRequest(BaseModel):
    """Body of POST <base_url>/chat/completions."""
    model: str
    messages: list[ChatMessage]


class _ChoiceMessage(BaseModel):
    role: str = "assistant"
    content: str | None = None


class _Choice(BaseModel):
    message: _ChoiceMessage


class _APIError(BaseModel):
    message: str = ""


class ChatCompletionResponse(BaseModel):
    """The subset of the response we rely on."""
    choices: list[_Choice] = Field(default_factory=list)
    error: _APIError | None = None


# ============================================================
#  PROVIDER CONTRACT
# ============================================================

class ModelProvider(ABC):
    """
    Abstract base for all LLM backends.

    Every provider declares whether it accepts a separate system prompt.
    ProviderManager queries ``supports_system_prompt`` instead of
    inspecting concrete types.
    """

    @property
    @abstractmethod
    def key(self) -> str:
        """Registration key, 'provider/model'."""
        ...

    @property
    @abstractmethod
    def supports_system_prompt(self) -> bool:
        """True when call_with_system_prompt() sends a real system message."""
        ...

    @abstractmethod
    async def call(self, prompt: str) -> str:
        """Send a single user prompt and return the reply text."""
        ...

    async def call_with_system_prompt(self, system_prompt: str, prompt: str) -> str:
        """Send a system + user prompt pair. Folds them together by default."""
        return await self.call(fold_system_prompt(system_prompt, prompt))


def fold_system_prompt(system_prompt: str, prompt: str) -> str:
    """Prepend the system prompt for providers without a system role."""
    if not system_prompt:
        return prompt
    return f"{system_prompt}\n\n{prompt}"


# ============================================================
#  OPENAI-COMPATIBLE PROVIDER
# ============================================================

class OpenAICompatibleProvider(ModelProvider):
    """
    Provider for any service implementing the OpenAI chat-completion API.

    One synchronous POST per call (no streaming, no retries). Proxies
    are taken from HTTP(S)_PROXY by httpx.
    """

    def __init__(
        self,
        key: str,
        base_url: str,
        api_key: str,
        model: str,
        timeout: float = DEFAULT_REQUEST_TIMEOUT,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._key = key
        self._base_url = base_url.rstrip("/")
        self._api_key = api_key
        self._model = model
        self._timeout = timeout
        self._transport = transport

    @property
    def key(self) -> str:
        return self._key

    @property
    def model(self) -> str:
        return self._model

    @property
    def supports_system_prompt(self) -> bool:
        return True

    async def call(self, prompt: str) -> str:
        return await self.call_with_system_prompt("", prompt)

    async def call_with_system_prompt(self, system_prompt: str, prompt: str) -> str:
        """
        POST a chat-completion request.

        Raises:
            RateLimitedError: On HTTP 429.
            ProviderError:    On transport, timeout, parse or API errors.
        """
        messages: list[ChatMessage] = []
        if system_prompt:
            messages.append(ChatMessage(role="system", content=system_prompt))
        messages.append(ChatMessage(role="user", content=prompt))

        request = ChatCompletionRequest(model=self._model, messages=messages)
        url = f"{self._base_url}/chat/completions"

        logger.info(
            "LLM request: provider='%s', model='%s', prompt_chars=%d",
            self._key, self._model, len(prompt),
        )

        try:
            async with httpx.AsyncClient(
                timeout=self._timeout, transport=self._transport,
            ) as client:
                response = await client.post(
                    url,
                    json=request.model_dump(),
                    headers={"Authorization": f"Bearer {self._api_key}"},
                )
        except httpx.TimeoutException as exc:
            raise ProviderError(
                self._key, f"API call timeout after {self._timeout:.0f}s: {exc}"
            ) from exc
        except httpx.HTTPError as exc:
            raise ProviderError(self._key, f"API call failed: {exc}") from exc
        except (httpx.InvalidURL, UnicodeEncodeError) as exc:
            # malformed base_url, or a non-ASCII api_key in the header
            raise ProviderError(self._key, f"invalid request settings: {exc}") from exc

        if response.status_code == 429:
            raise RateLimitedError(self._key, "quota exceeded or rate limited (HTTP 429)")

        try:
            data = ChatCompletionResponse.model_validate(response.json())
        except ValueError as exc:
            raise ProviderError(
                self._key,
                f"failed to parse response (HTTP {response.status_code}): {exc}",
            ) from exc

        if data.error is not None:
            raise ProviderError(self._key, f"API error: {data.error.message}")

        if response.is_error:
            raise ProviderError(self._key, f"HTTP {response.status_code}")

        if not data.choices or data.choices[0].message.content is None:
            raise ProviderError(self._key, "no response choices returned")

        return data.choices[0].message.content


# ============================================================
#  PROVIDER MANAGER
# ============================================================

@dataclass(frozen=True)
class ProviderStatus:
    """Snapshot of one registered provider."""
    key: str
    enabled: bool
    rate_limited: bool

    @property
    def available(self) -> bool:
        return self.enabled and not self.rate_limited


FailureCallback = Callable[[str, Exception], None]


class ProviderManager:
    """
    Registry of providers in registration order, with fallback calls.

    The registry may be touched by startup code and the active call
    path; all registry state is guarded by a lock that is never held
    across an await.
    """

    def __init__(self, on_failure: FailureCallback | None = None) -> None:
        self._providers: dict[str, ModelProvider] = {}
        self._rate_limited: set[str] = set()
        self._disabled: set[str] = set()
        self._lock = threading.Lock()
        self._on_failure = on_failure

    @classmethod
    def from_config(
        cls,
        config: AppConfig,
        transport: httpx.AsyncBaseTransport | None = None,
        on_failure: FailureCallback | None = None,
    ) -> ProviderManager:
        """Register one OpenAI-compatible provider per enabled model."""
        manager = cls(on_failure=on_failure)
        for entry in config.enabled_entries():
            manager.register(OpenAICompatibleProvider(
                key=entry.key,
                base_url=entry.base_url,
                api_key=entry.api_key,
                model=entry.model,
                timeout=config.session.request_timeout_seconds,
                transport=transport,
            ))
        return manager

    # --- Registry ---

    def register(self, provider: ModelProvider) -> None:
        """Register a provider at the end of the order. Duplicate keys are rejected."""
        with self._lock:
            if provider.key in self._providers:
                raise ValueError(f"Duplicate provider key: '{provider.key}' is already registered.")
            self._providers[provider.key] = provider
        logger.info("Registered provider: '%s' (position %d)", provider.key, len(self._providers))

    def keys(self) -> list[str]:
        with self._lock:
            return list(self._providers)

    def set_enabled(self, key: str, enabled: bool) -> None:
        """Manual override, independent of 429 unavailability."""
        with self._lock:
            if key not in self._providers:
                raise KeyError(key)
            if enabled:
                self._disabled.discard(key)
            else:
                self._disabled.add(key)

    def mark_rate_limited(self, key: str) -> None:
        """Sticky for the process lifetime; there is no reset."""
        with self._lock:
            self._rate_limited.add(key)
        logger.warning("Provider '%s' marked unavailable (HTTP 429)", key)

    def available_keys(self) -> list[str]:
        """Available providers in registration order."""
        with self._lock:
            return [
                key for key in self._providers
                if key not in self._disabled and key not in self._rate_limited
            ]

    def status(self) -> list[ProviderStatus]:
        with self._lock:
            return [
                ProviderStatus(
                    key=key,
                    enabled=key not in self._disabled,
                    rate_limited=key in self._rate_limited,
                )
                for key in self._providers
            ]

    # --- Calls ---

    async def call_with_fallback(
        self,
        system_prompt: str,
        prompt: str,
        cancel_event: asyncio.Event | None = None,
    ) -> tuple[str, str]:
        """
        Call providers in order until one answers.

        Args:
            system_prompt: Phase prompt; may be empty.
            prompt:        Flattened conversation context (single user message).
            cancel_event:  Checked before each provider attempt.

        Returns:
            (response_text, provider_key)

        Raises:
            UserAbortError:          If cancel_event is set.
            AllProvidersFailedError: If no available provider answered.
        """
        candidates = self.available_keys()
        if not candidates:
            raise AllProvidersFailedError("no available LLM providers")

        last_error: Exception | None = None

        for key in candidates:
            if cancel_event is not None and cancel_event.is_set():
                raise UserAbortError("cancelled before contacting provider")

            with self._lock:
                provider = self._providers[key]

            try:
                if provider.supports_system_prompt:
                    response = await provider.call_with_system_prompt(system_prompt, prompt)
                else:
                    response = await provider.call(fold_system_prompt(system_prompt, prompt))
            except RateLimitedError as exc:
                last_error = exc
                self.mark_rate_limited(key)
                self._notify_failure(key, exc)
                continue
            except ProviderError as exc:
                last_error = exc
                logger.warning("Provider '%s' failed, trying next: %s", key, exc)
                self._notify_failure(key, exc)
                continue

            logger.info("Provider '%s' answered (%d chars)", key, len(response))
            return response, key

        raise AllProvidersFailedError("all model calls failed", last_error)

    def _notify_failure(self, key: str, exc: Exception) -> None:
        if self._on_failure is not None:
            self._on_failure(key, exc)
