"""Admin backend client for the collections the journey engine consumes."""

from __future__ import annotations

import logging
import time
from typing import Any, Callable, Dict, List, Optional

import requests

from ..config import (
    BACKEND_BACKOFF_MAX_SECONDS,
    BACKEND_MAX_RETRIES,
    CLIENT_FETCH_LIMIT,
    EXPENSE_FETCH_LIMIT,
    FIELD_API_BASE_URL,
    FIELD_API_TOKEN,
    MEETING_FETCH_LIMIT,
    PING_FETCH_LIMIT,
    REQUEST_TIMEOUT,
    USER_FETCH_LIMIT,
)
from ..errors import BackendAPIError
from ..normalize import RawRecord, extract_records
from .response_handling import classify_response_status
from .session import create_session, get_default_session

LOGGER = logging.getLogger(__name__)


class BackendClient:
    """Fetches raw wire records with retries and rich errors.

    Returned records are untouched backend dictionaries; callers run them
    through ``field_journey.normalize`` before handing them to the engine.
    """

    def __init__(
        self,
        *,
        base_url: str = FIELD_API_BASE_URL,
        token: str = FIELD_API_TOKEN,
        session: requests.Session | None = None,
        timeout: float = REQUEST_TIMEOUT,
        max_retries: int = BACKEND_MAX_RETRIES,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._token = token
        if session is None:
            uses_defaults = self._base_url == FIELD_API_BASE_URL and token == FIELD_API_TOKEN
            session = get_default_session() if uses_defaults else create_session(self._base_url, token=token)
        self._session = session
        self._timeout = timeout
        self._max_retries = max(1, max_retries)
        self._sleep = sleep

    def _headers(self) -> Dict[str, str]:
        if not self._token:
            return {}
        return {"Authorization": f"Bearer {self._token}"}

    def fetch_json(
        self,
        path: str,
        params: Optional[Dict[str, Any]],
        context: str,
    ) -> Any:
        url = f"{self._base_url}/{path.lstrip('/')}"
        backoff = 1.0
        attempt = 0
        while True:
            attempt += 1
            can_retry = attempt < self._max_retries
            try:
                response = self._session.get(
                    url,
                    headers=self._headers(),
                    params=params,
                    timeout=self._timeout,
                )
            except requests.RequestException as exc:
                if can_retry:
                    LOGGER.warning(
                        "%s network error attempt=%s err=%s; retrying in %.1fs",
                        context,
                        attempt,
                        exc.__class__.__name__,
                        backoff,
                    )
                    self._sleep(backoff)
                    backoff = min(backoff * 2, BACKEND_BACKOFF_MAX_SECONDS)
                    continue
                message = f"{context} network error: {exc.__class__.__name__}"
                LOGGER.error(message)
                raise BackendAPIError(message) from exc

            action, error = classify_response_status(
                response,
                context,
                attempt=attempt,
                backoff=backoff,
                can_retry=can_retry,
            )
            if action == "retry":
                self._sleep(backoff)
                backoff = min(backoff * 2, BACKEND_BACKOFF_MAX_SECONDS)
                continue
            if action == "raise" and error is not None:
                raise error

            try:
                return response.json()
            except ValueError as exc:
                if can_retry:
                    LOGGER.warning(
                        "Non-JSON response for %s attempt=%s; retrying in %.1fs",
                        context,
                        attempt,
                        backoff,
                    )
                    self._sleep(backoff)
                    backoff = min(backoff * 2, BACKEND_BACKOFF_MAX_SECONDS)
                    continue
                message = f"{context} returned non-JSON payload"
                LOGGER.error(message)
                raise BackendAPIError(message) from exc

    def _fetch_list(
        self, path: str, collection: str, limit: int, context: str
    ) -> List[RawRecord]:
        payload = self.fetch_json(path, {"limit": limit}, context)
        records = extract_records(payload, collection)
        LOGGER.debug("%s returned %d %s record(s)", context, len(records), collection)
        return records

    def fetch_users(self, limit: int = USER_FETCH_LIMIT) -> List[RawRecord]:
        return self._fetch_list("admin/users", "users", limit, "users")

    def fetch_clients(self, limit: int = CLIENT_FETCH_LIMIT) -> List[RawRecord]:
        return self._fetch_list("admin/clients", "clients", limit, "clients")

    def fetch_location_logs(
        self, agent_id: str, limit: int = PING_FETCH_LIMIT
    ) -> List[RawRecord]:
        return self._fetch_list(
            f"admin/location-logs/{agent_id}", "pings", limit, f"location logs agent={agent_id}"
        )

    def fetch_meetings(
        self, agent_id: str, limit: int = MEETING_FETCH_LIMIT
    ) -> List[RawRecord]:
        return self._fetch_list(
            f"admin/user-meetings/{agent_id}", "meetings", limit, f"meetings agent={agent_id}"
        )

    def fetch_expenses(
        self, agent_id: str, limit: int = EXPENSE_FETCH_LIMIT
    ) -> List[RawRecord]:
        return self._fetch_list(
            f"admin/user-expenses/{agent_id}", "expenses", limit, f"expenses agent={agent_id}"
        )


__all__ = ["BackendClient"]
