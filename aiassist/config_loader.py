"""
Configuration Loader
=====================
Reads ~/.aiassist/config.yaml into immutable, typed objects.

The resulting AppConfig is built ONCE at startup and handed explicitly
to the ProviderManager and the Session. There is no global config.

Ordering:
  providers is a YAML *list*. Its order (and the order of each provider's
  models) is the registration order and therefore the fallback order.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from aiassist.errors import ConfigError
from aiassist.i18n import LANGUAGE_CHINESE, LANGUAGE_ENGLISH
from aiassist.output import OUTPUT_MAX_CHARS, PIPE_MAX_CHARS

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_DIR = Path.home() / ".aiassist"
DEFAULT_CONFIG_FILE = DEFAULT_CONFIG_DIR / "config.yaml"


# ============================================================
#  CONFIGURATION MODELS
# ============================================================

@dataclass(frozen=True)
class ModelConfig:
    """One model served by a provider."""
    name: str
    enabled: bool = True


@dataclass(frozen=True)
class ProviderConfig:
    """An OpenAI-compatible endpoint and the models it serves."""
    name: str
    base_url: str
    api_key: str
    models: tuple[ModelConfig, ...] = ()
    enabled: bool = True


@dataclass(frozen=True)
class ProviderEntry:
    """A registrable (provider, model) pair, keyed 'provider/model'."""
    key: str
    base_url: str
    api_key: str
    model: str


@dataclass(frozen=True)
class SessionSettings:
    """Limits for the agentic loop."""
    max_depth: int = 10
    output_max_chars: int = OUTPUT_MAX_CHARS
    pipe_max_chars: int = PIPE_MAX_CHARS
    request_timeout_seconds: float = 120.0
    command_timeout_seconds: float | None = None


@dataclass(frozen=True)
class AppConfig:
    """Aggregated application configuration."""
    language: str = LANGUAGE_ENGLISH
    default_model: str = ""
    providers: tuple[ProviderConfig, ...] = ()
    blacklist: tuple[str, ...] = ()
    session: SessionSettings = field(default_factory=SessionSettings)
    config_file: Path = DEFAULT_CONFIG_FILE

    def enabled_entries(self) -> list[ProviderEntry]:
        """Enabled provider/model pairs, in configuration order."""
        entries: list[ProviderEntry] = []
        for provider in self.providers:
            if not provider.enabled:
                continue
            for model in provider.models:
                if not model.enabled:
                    continue
                entries.append(ProviderEntry(
                    key=f"{provider.name}/{model.name}",
                    base_url=provider.base_url.rstrip("/"),
                    api_key=provider.api_key,
                    model=model.name,
                ))
        return entries


# ============================================================
#  LOADER
# ============================================================

class ConfigLoader:
    """
    Loads the YAML configuration file.

    Resolution order for the file path:
      1. explicit ``config_file`` argument (``--config``)
      2. ``AIASSIST_CONFIG`` environment variable
      3. ``~/.aiassist/config.yaml``
    """

    def __init__(self, config_file: str | Path | None = None) -> None:
        if config_file is None:
            config_file = os.environ.get("AIASSIST_CONFIG") or DEFAULT_CONFIG_FILE
        self._config_file = Path(config_file).expanduser()

    @property
    def config_file(self) -> Path:
        return self._config_file

    def load(self) -> AppConfig:
        """
        Parse the config file into an AppConfig.

        Raises:
            ConfigError: If the file is missing, unreadable or malformed.
        """
        raw = self._read_yaml()

        language = str(raw.get("language", LANGUAGE_ENGLISH)).strip().lower()
        if language not in (LANGUAGE_ENGLISH, LANGUAGE_CHINESE):
            language = LANGUAGE_ENGLISH

        providers_raw = raw.get("providers") or []
        if not isinstance(providers_raw, list):
            raise ConfigError("'providers' must be a list (its order is the fallback order)")

        config = AppConfig(
            language=language,
            default_model=str(raw.get("default_model") or ""),
            providers=tuple(self._parse_provider(p) for p in providers_raw),
            blacklist=tuple(str(item) for item in raw.get("blacklist") or []),
            session=self._parse_session(raw.get("session") or {}),
            config_file=self._config_file,
        )

        logger.info(
            "Configuration loaded from %s: %d providers, %d enabled models, language=%s",
            self._config_file, len(config.providers),
            len(config.enabled_entries()), config.language,
        )
        return config

    def _read_yaml(self) -> dict[str, Any]:
        if not self._config_file.exists():
            raise ConfigError(f"config file not found: {self._config_file}")

        try:
            with open(self._config_file, "r", encoding="utf-8") as f:
                data = yaml.safe_load(f)
        except (OSError, yaml.YAMLError) as exc:
            raise ConfigError(f"cannot read {self._config_file}: {exc}") from exc

        if data is None:
            return {}
        if not isinstance(data, dict):
            raise ConfigError(f"{self._config_file} must contain a mapping")
        return data

    @staticmethod
    def _parse_provider(raw: Any) -> ProviderConfig:
        if not isinstance(raw, dict):
            raise ConfigError(f"provider entry must be a mapping, got: {raw!r}")

        name = str(raw.get("name") or "").strip()
        base_url = str(raw.get("base_url") or "").strip()
        if not name or not base_url:
            raise ConfigError("each provider needs 'name' and 'base_url'")

        models: list[ModelConfig] = []
        for model in raw.get("models") or []:
            if isinstance(model, str):
                models.append(ModelConfig(name=model))
            elif isinstance(model, dict) and model.get("name"):
                models.append(ModelConfig(
                    name=str(model["name"]),
                    enabled=bool(model.get("enabled", True)),
                ))
            else:
                raise ConfigError(f"invalid model entry for provider '{name}': {model!r}")

        return ProviderConfig(
            name=name,
            base_url=base_url,
            api_key=str(raw.get("api_key") or ""),
            models=tuple(models),
            enabled=bool(raw.get("enabled", True)),
        )

    @staticmethod
    def _parse_session(raw: dict[str, Any]) -> SessionSettings:
        defaults = SessionSettings()
        command_timeout = raw.get("command_timeout_seconds")
        try:
            return SessionSettings(
                max_depth=int(raw.get("max_depth", defaults.max_depth)),
                output_max_chars=int(raw.get("output_max_chars", defaults.output_max_chars)),
                pipe_max_chars=int(raw.get("pipe_max_chars", defaults.pipe_max_chars)),
                request_timeout_seconds=float(
                    raw.get("request_timeout_seconds", defaults.request_timeout_seconds)
                ),
                command_timeout_seconds=(
                    float(command_timeout) if command_timeout is not None else None
                ),
            )
        except (TypeError, ValueError) as exc:
            raise ConfigError(f"invalid 'session' settings: {exc}") from exc
