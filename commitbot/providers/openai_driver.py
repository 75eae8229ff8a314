from __future__ import annotations

from typing import Any, List, Optional

from ..config import Provider
from .base import BaseDriver, ProviderRequest


class OpenAIDriver(BaseDriver):
    """Driver for OpenAI / OpenAI-compatible chat completions."""

    provider = Provider.OPENAI
    DEFAULT_ENDPOINT = "https://api.openai.com/v1/chat/completions"
    MODEL = "gpt-3.5-turbo"

    def build_request(
        self,
        prompt: str,
        api_key: str,
        suggestion_count: int,
        endpoint: Optional[str] = None,
    ) -> ProviderRequest:
        return ProviderRequest(
            endpoint=self.resolve_endpoint(endpoint),
            headers={
                "Content-Type": "application/json",
                "Authorization": f"Bearer {api_key}",
            },
            body={
                "model": self.MODEL,
                "messages": [{"role": "user", "content": prompt}],
                "n": suggestion_count,
            },
        )

    def parse_response(self, data: Any) -> List[str]:
        out: List[str] = []
        for idx, choice in enumerate(self._items(data, "choices")):
            try:
                content = choice["message"]["content"]
            except (KeyError, TypeError):
                self._skip(idx, choice)
                continue
            if not isinstance(content, str):
                self._skip(idx, choice)
                continue
            out.append(content.strip())
        return out
