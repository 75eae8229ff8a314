from __future__ import annotations

from typing import Any, List, Optional

from ..config import Provider
from .base import BaseDriver, ProviderRequest


class GeminiDriver(BaseDriver):
    """Driver for the Gemini ``generateContent`` API."""

    provider = Provider.GEMINI
    DEFAULT_ENDPOINT = (
        "https://generativelanguage.googleapis.com/v1beta/models/"
        "gemini-1.5-flash-latest:generateContent"
    )
    API_KEY_HEADER = "x-goog-api-key"

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
                self.API_KEY_HEADER: api_key,
            },
            body={
                "contents": [{"parts": [{"text": prompt}]}],
                "generationConfig": {"candidateCount": suggestion_count},
            },
        )

    def parse_response(self, data: Any) -> List[str]:
        # candidates[].content.parts[0].text
        out: List[str] = []
        for idx, candidate in enumerate(self._items(data, "candidates")):
            try:
                text = candidate["content"]["parts"][0]["text"]
            except (KeyError, IndexError, TypeError):
                self._skip(idx, candidate)
                continue
            if not isinstance(text, str):
                self._skip(idx, candidate)
                continue
            out.append(text.strip())
        return out
