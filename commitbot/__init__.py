"""commitbot - AI-generated commit message suggestions for staged changes."""

from importlib import import_module
from typing import TYPE_CHECKING

__version__ = "0.1.0"

# Public API (lazy-exported to avoid import-time side effects)
__all__ = [
    # Config
    "Config", "Provider", "load_config",
    # Secrets
    "SecretStore", "FileSecretStore", "MemorySecretStore",
    # Git
    "GitRepo", "read_staged_diff", "read_recent_subjects",
    # Prompt
    "build_prompt", "GenerationRequest",
    # Providers
    "get_driver",
    # Transport
    "post",
    # Core workflow
    "CommitBotWorkflow", "RunOutcome", "RunState",
    # Exceptions
    "CommitBotError", "UserError", "ConfigError", "ProcessError",
    "TransportError", "HttpError", "ParseError", "EmptyResultError",
]


def __getattr__(name: str):
    """Lazy attribute loader so ``import commitbot`` stays cheap.

    Importing the package must not pull in httpx or read configuration;
    submodules load on first attribute access.
    """
    mapping = {
        "Config": ("commitbot.config", "Config"),
        "Provider": ("commitbot.config", "Provider"),
        "load_config": ("commitbot.config", "load_config"),
        "SecretStore": ("commitbot.secrets", "SecretStore"),
        "FileSecretStore": ("commitbot.secrets", "FileSecretStore"),
        "MemorySecretStore": ("commitbot.secrets", "MemorySecretStore"),
        "GitRepo": ("commitbot.git", "GitRepo"),
        "read_staged_diff": ("commitbot.git", "read_staged_diff"),
        "read_recent_subjects": ("commitbot.git", "read_recent_subjects"),
        "build_prompt": ("commitbot.prompt", "build_prompt"),
        "GenerationRequest": ("commitbot.prompt", "GenerationRequest"),
        "get_driver": ("commitbot.providers", "get_driver"),
        "post": ("commitbot.transport", "post"),
        "CommitBotWorkflow": ("commitbot.core", "CommitBotWorkflow"),
        "RunOutcome": ("commitbot.core", "RunOutcome"),
        "RunState": ("commitbot.core", "RunState"),
        "CommitBotError": ("commitbot.exceptions", "CommitBotError"),
        "UserError": ("commitbot.exceptions", "UserError"),
        "ConfigError": ("commitbot.exceptions", "ConfigError"),
        "ProcessError": ("commitbot.exceptions", "ProcessError"),
        "TransportError": ("commitbot.exceptions", "TransportError"),
        "HttpError": ("commitbot.exceptions", "HttpError"),
        "ParseError": ("commitbot.exceptions", "ParseError"),
        "EmptyResultError": ("commitbot.exceptions", "EmptyResultError"),
    }
    if name in mapping:
        mod_name, attr = mapping[name]
        mod = import_module(mod_name)
        value = getattr(mod, attr)
        globals()[name] = value  # cache for future access
        return value
    raise AttributeError(f"module 'commitbot' has no attribute {name!r}")


if TYPE_CHECKING:
    from .config import Config, Provider, load_config
    from .core import CommitBotWorkflow, RunOutcome, RunState
    from .exceptions import (
        CommitBotError,
        ConfigError,
        EmptyResultError,
        HttpError,
        ParseError,
        ProcessError,
        TransportError,
        UserError,
    )
    from .git import GitRepo, read_recent_subjects, read_staged_diff
    from .prompt import GenerationRequest, build_prompt
    from .providers import get_driver
    from .secrets import FileSecretStore, MemorySecretStore, SecretStore
    from .transport import post
