"""Provider drivers translating between commitbot and remote LLM APIs."""

from __future__ import annotations

from typing import Dict, Type

from ..config import Provider
from .base import BaseDriver, ProviderRequest
from .gemini_driver import GeminiDriver
from .openai_driver import OpenAIDriver

DRIVERS: Dict[Provider, Type[BaseDriver]] = {
    Provider.GEMINI: GeminiDriver,
    Provider.OPENAI: OpenAIDriver,
}


def get_driver(provider: "str | Provider") -> BaseDriver:
    """Return a driver instance for ``provider``."""
    return DRIVERS[Provider.parse(provider)]()


__all__ = [
    "BaseDriver",
    "DRIVERS",
    "GeminiDriver",
    "OpenAIDriver",
    "ProviderRequest",
    "get_driver",
]
