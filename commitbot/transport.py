"""Single-shot JSON POST used to reach provider endpoints."""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional

import httpx

from .config import DEFAULT_REQUEST_TIMEOUT
from .exceptions import HttpError, ParseError, TransportError

logger = logging.getLogger(__name__)


def post(
    endpoint: str,
    headers: Dict[str, str],
    body: Dict[str, Any],
    timeout: Optional[float] = DEFAULT_REQUEST_TIMEOUT,
) -> Any:
    """POST ``body`` as JSON and return the decoded JSON response.

    Raises HttpError for non-2xx responses (status and body text kept
    verbatim), ParseError when the body is not JSON and TransportError when
    no response was received at all.
    """
    logger.debug("POST %s", endpoint)
    try:
        response = httpx.post(
            endpoint,
            headers=headers,
            json=body,
            timeout=timeout,
        )
    except httpx.HTTPError as e:
        raise TransportError(f"Request to {endpoint} failed: {e}") from e

    status = int(response.status_code)
    logger.debug("POST %s -> %d", endpoint, status)
    if not 200 <= status < 300:
        raise HttpError(status, response.text)

    try:
        return response.json()
    except ValueError as e:
        raise ParseError(
            f"Response from {endpoint} is not valid JSON: {e}"
        ) from e
