"""Shared HTTP response helpers for admin backend interactions."""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional, Tuple

import requests

from ..errors import BackendAPIError, BackendNotFoundError, BackendPermissionError

LOGGER = logging.getLogger(__name__)

__all__ = [
    "classify_response_status",
    "extract_error",
]


def classify_response_status(
    response: requests.Response,
    context: str,
    *,
    attempt: int,
    backoff: float,
    can_retry: bool,
) -> Tuple[str, Optional[Exception]]:
    """Return action for a response status: ok, retry, or raise."""

    status = response.status_code
    detail = extract_error(response)

    def with_detail(message: str) -> str:
        return f"{message} | {detail}" if detail else message

    if status == 429 and can_retry:
        LOGGER.warning(
            "%s rate limited (429) attempt=%s; sleeping %.1fs",
            context,
            attempt,
            backoff,
        )
        return "retry", None

    if status in (401, 403):
        message = with_detail(f"{context} rejected credentials (status {status})")
        LOGGER.warning(message)
        return "raise", BackendPermissionError(message)

    if status == 404:
        message = with_detail(f"{context} not found")
        LOGGER.info(message)
        return "raise", BackendNotFoundError(message)

    if 500 <= status < 600 and can_retry:
        message = with_detail(f"{context} server error {status}")
        LOGGER.warning("%s; retrying in %.1fs", message, backoff)
        return "retry", None

    if 400 <= status < 600:
        message = with_detail(f"{context} request failed (status {status})")
        LOGGER.error(message)
        return "raise", BackendAPIError(message)

    return "ok", None


def extract_error(resp: Optional[requests.Response]) -> Optional[str]:
    """Return compact string with the backend error message if present."""

    if resp is None:
        return None
    data = _safe_json(resp)
    if data is None:
        return _extract_error_text(resp)
    if not isinstance(data, dict):
        return None
    parts = _collect_error_parts(data)
    return " | ".join(parts) if parts else None


def _safe_json(resp: requests.Response) -> Optional[Any]:
    """Safely parse JSON; return None if parsing fails."""

    try:
        return resp.json()
    except ValueError as exc:
        LOGGER.debug("Failed to decode JSON from %s: %s", getattr(resp, "url", "?"), exc)
        return None


def _extract_error_text(resp: requests.Response) -> Optional[str]:
    """Best-effort plain-text extraction when JSON parsing fails."""

    text = getattr(resp, "text", "")
    if not isinstance(text, str):
        return None
    trimmed = text.strip()
    if not trimmed:
        return None
    return (trimmed[:297] + "...") if len(trimmed) > 300 else trimmed


def _collect_error_parts(data: Dict[str, Any]) -> List[str]:
    """Build error snippets from ``{"error": ..., "message": ..., "code": ...}``."""

    parts: List[str] = []
    for key in ("error", "message", "detail"):
        value = data.get(key)
        if isinstance(value, str) and value:
            parts.append(value)
    code = data.get("code")
    if code:
        parts.append(str(code))
    return parts
