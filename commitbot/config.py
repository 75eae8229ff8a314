"""Configuration management for commitbot."""

from __future__ import annotations

import json
import logging
import os
from dataclasses import asdict, dataclass, replace
from enum import Enum
from pathlib import Path
from typing import Any, Dict, Optional

from .exceptions import ConfigError

logger = logging.getLogger(__name__)

CONFIG_DIR_NAME = ".commitbot"
CONFIG_FILE_NAME = "config.json"
CONFIG_HOME_ENV = "COMMITBOT_CONFIG_HOME"

DEFAULT_MAX_DIFF_CHARS = 20000
DEFAULT_SUGGESTION_COUNT = 3
DEFAULT_REQUEST_TIMEOUT = 60.0

# Setting name -> environment variable that may override it.
ENV_OVERRIDES = {
    "provider": "COMMITBOT_PROVIDER",
    "endpoint": "COMMITBOT_ENDPOINT",
    "max_diff_chars": "COMMITBOT_MAX_DIFF_CHARS",
    "suggestion_count": "COMMITBOT_SUGGESTION_COUNT",
    "request_timeout": "COMMITBOT_REQUEST_TIMEOUT",
}


class Provider(str, Enum):
    """Remote text-generation APIs commitbot knows how to talk to."""

    GEMINI = "gemini"
    OPENAI = "openai"

    @property
    def display_name(self) -> str:
        return PROVIDER_DISPLAY_NAMES[self]

    @classmethod
    def parse(cls, value: "str | Provider") -> "Provider":
        """Parse a provider name case-insensitively (``Gemini``, ``openai``)."""
        if isinstance(value, Provider):
            return value
        key = str(value).strip().lower()
        for member in cls:
            if member.value == key:
                return member
        choices = ", ".join(PROVIDER_DISPLAY_NAMES[m] for m in cls)
        raise ConfigError(f"Unknown provider: {value!r}. Use one of: {choices}.")


PROVIDER_DISPLAY_NAMES = {
    Provider.GEMINI: "Gemini",
    Provider.OPENAI: "OpenAI",
}


@dataclass(frozen=True)
class Config:
    """Immutable snapshot of the settings used for one generation run."""

    provider: Provider = Provider.GEMINI
    # Empty means "use the provider default endpoint".
    endpoint: str = ""
    max_diff_chars: int = DEFAULT_MAX_DIFF_CHARS
    suggestion_count: int = DEFAULT_SUGGESTION_COUNT
    request_timeout: float = DEFAULT_REQUEST_TIMEOUT

    def __post_init__(self) -> None:
        object.__setattr__(self, "provider", Provider.parse(self.provider))
        object.__setattr__(self, "endpoint", (self.endpoint or "").strip())
        object.__setattr__(
            self,
            "max_diff_chars",
            _positive_int("max_diff_chars", self.max_diff_chars),
        )
        object.__setattr__(
            self,
            "suggestion_count",
            _positive_int("suggestion_count", self.suggestion_count),
        )
        object.__setattr__(
            self,
            "request_timeout",
            _positive_float("request_timeout", self.request_timeout),
        )

    def to_dict(self) -> Dict[str, Any]:
        """Serialise configuration to a dict for persistence."""
        data = asdict(self)
        data["provider"] = self.provider.value
        return data

    def with_overrides(self, **changes: Any) -> "Config":
        """Return a copy with the non-None ``changes`` applied."""
        effective = {k: v for k, v in changes.items() if v is not None}
        return replace(self, **effective) if effective else self


def _positive_int(name: str, value: Any) -> int:
    try:
        number = int(value)
    except (TypeError, ValueError):
        raise ConfigError(f"{name} must be an integer, got {value!r}") from None
    if number <= 0:
        raise ConfigError(f"{name} must be a positive integer, got {number}")
    return number


def _positive_float(name: str, value: Any) -> float:
    try:
        number = float(value)
    except (TypeError, ValueError):
        raise ConfigError(f"{name} must be a number, got {value!r}") from None
    if number <= 0:
        raise ConfigError(f"{name} must be positive, got {number}")
    return number


def config_home() -> Path:
    """Directory holding the persisted config and secrets."""
    override = os.environ.get(CONFIG_HOME_ENV)
    if override:
        return Path(override).expanduser().resolve(strict=False)
    return (Path.home() / CONFIG_DIR_NAME).resolve(strict=False)


def _config_file(home: Optional[Path] = None) -> Path:
    return (home or config_home()) / CONFIG_FILE_NAME


def save_config(config: Config, home: Optional[Path] = None) -> Path:
    """Persist configuration JSON in the config home."""
    cfg_path = _config_file(home)
    cfg_path.parent.mkdir(parents=True, exist_ok=True)
    cfg_path.write_text(json.dumps(config.to_dict(), indent=2))
    logger.debug("Saved configuration to %s", cfg_path)
    return cfg_path


def load_persisted_settings(home: Optional[Path] = None) -> Dict[str, Any]:
    """Return the raw settings stored on disk, or an empty dict."""
    cfg_path = _config_file(home)
    if not cfg_path.exists():
        return {}
    try:
        data = json.loads(cfg_path.read_text())
    except (OSError, ValueError) as exc:
        raise ConfigError(f"Could not read {cfg_path}: {exc}") from exc
    if not isinstance(data, dict):
        raise ConfigError(f"{cfg_path} must contain a JSON object")
    known = {f for f in Config.__dataclass_fields__}
    return {k: v for k, v in data.items() if k in known}


def load_config(
    *,
    home: Optional[Path] = None,
    overrides: Optional[Dict[str, Any]] = None,
) -> Config:
    """Build a configuration snapshot.

    Precedence, lowest first: built-in defaults, the persisted
    ``config.json``, ``COMMITBOT_*`` environment variables, then
    ``overrides``.
    """
    settings: Dict[str, Any] = load_persisted_settings(home)

    for name, env_name in ENV_OVERRIDES.items():
        env_value = os.environ.get(env_name)
        if env_value:
            settings[name] = env_value

    for name, value in (overrides or {}).items():
        if value is not None:
            settings[name] = value

    config = Config(**settings)
    logger.debug("Loaded configuration: %s", config.to_dict())
    return config
