"""Storage for the provider API key."""

from __future__ import annotations

import json
import logging
import os
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Dict, Optional

from .config import config_home
from .exceptions import ConfigError

logger = logging.getLogger(__name__)

API_KEY_SECRET = "commitbot.apiKey"
API_KEY_ENV = "COMMITBOT_API_KEY"
SECRETS_FILE_NAME = "secrets.json"


class SecretStore(ABC):
    """Capability to read and write named secrets."""

    @abstractmethod
    def get(self, name: str) -> Optional[str]:
        raise NotImplementedError

    @abstractmethod
    def set(self, name: str, value: str) -> None:
        raise NotImplementedError


class MemorySecretStore(SecretStore):
    """Process-local store; nothing is persisted."""

    def __init__(self, initial: Optional[Dict[str, str]] = None) -> None:
        self._values: Dict[str, str] = dict(initial or {})

    def get(self, name: str) -> Optional[str]:
        return self._values.get(name) or None

    def set(self, name: str, value: str) -> None:
        self._values[name] = value


class FileSecretStore(SecretStore):
    """Secrets kept in an owner-only JSON file inside the config home.

    When the requested API key has never been stored, ``COMMITBOT_API_KEY``
    from the environment is used instead.
    """

    def __init__(self, path: Optional[Path] = None) -> None:
        self.path = Path(path) if path else config_home() / SECRETS_FILE_NAME

    def _read(self) -> Dict[str, str]:
        if not self.path.exists():
            return {}
        try:
            data = json.loads(self.path.read_text())
        except (OSError, ValueError) as exc:
            raise ConfigError(f"Could not read {self.path}: {exc}") from exc
        if not isinstance(data, dict):
            return {}
        # null or non-string values count as unset
        return {
            str(k): v for k, v in data.items() if isinstance(v, str) and v
        }

    def get(self, name: str) -> Optional[str]:
        value = self._read().get(name)
        if not value and name == API_KEY_SECRET:
            value = os.environ.get(API_KEY_ENV)
        return value or None

    def set(self, name: str, value: str) -> None:
        data = self._read()
        data[name] = value
        self.path.parent.mkdir(parents=True, exist_ok=True)
        fd = os.open(self.path, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, 0o600)
        with os.fdopen(fd, "w") as handle:
            json.dump(data, handle, indent=2)
        # O_CREAT mode is ignored for files that already existed.
        os.chmod(self.path, 0o600)
        logger.debug("Stored secret %s in %s", name, self.path)
