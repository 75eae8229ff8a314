from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, ClassVar, Dict, List, Optional

from ..config import Provider

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ProviderRequest:
    """Outbound HTTP request shape produced by a driver."""

    endpoint: str
    headers: Dict[str, str] = field(default_factory=dict)
    body: Dict[str, Any] = field(default_factory=dict)


class BaseDriver(ABC):
    """Abstract base for provider-specific request/response handling.

    Each driver knows one provider's endpoint, authentication header and
    JSON shapes. It performs no I/O: the orchestrator hands the request it
    builds to the transport and feeds the decoded JSON back into
    ``parse_response``. Adding a provider means adding a driver and
    registering it in ``commitbot.providers``.
    """

    provider: ClassVar[Provider]
    DEFAULT_ENDPOINT: ClassVar[str]

    def resolve_endpoint(self, endpoint: Optional[str] = None) -> str:
        """Return ``endpoint`` when configured, else the provider default."""
        return endpoint or self.DEFAULT_ENDPOINT

    @abstractmethod
    def build_request(
        self,
        prompt: str,
        api_key: str,
        suggestion_count: int,
        endpoint: Optional[str] = None,
    ) -> ProviderRequest:
        raise NotImplementedError

    @abstractmethod
    def parse_response(self, data: Any) -> List[str]:
        """Return candidate messages in provider order, each stripped.

        Missing or malformed fields yield fewer (possibly zero) candidates;
        this method never raises on unexpected shapes.
        """
        raise NotImplementedError

    @staticmethod
    def _items(data: Any, key: str) -> List[Any]:
        if not isinstance(data, dict):
            return []
        items = data.get(key)
        return items if isinstance(items, list) else []

    def _skip(self, index: int, item: Any) -> None:
        logger.debug(
            "%s: skipping malformed entry %d: %r",
            type(self).__name__,
            index,
            item,
        )
