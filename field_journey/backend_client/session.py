"""Pooled HTTP sessions for the admin backend.

Only connection failures are retried at the transport level. Status codes
(429, 5xx) and malformed payloads are retried by ``BackendClient`` so the
backoff and logging stay in one place.
"""

from __future__ import annotations

from functools import lru_cache

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from ..config import FIELD_API_BASE_URL, FIELD_API_TOKEN, HTTP_POOL_CONNECTIONS, HTTP_POOL_MAXSIZE

__all__ = ["create_session", "get_default_session"]

USER_AGENT = "field-journey/0.1"


def _connect_retry(attempts: int) -> Retry:
    return Retry(
        total=attempts,
        connect=attempts,
        read=0,
        status=0,
        backoff_factor=0.5,
        allowed_methods=frozenset({"GET"}),
        raise_on_status=False,
    )


def create_session(
    base_url: str = FIELD_API_BASE_URL,
    *,
    token: str | None = None,
    connect_retries: int = 3,
) -> requests.Session:
    """Session whose pooled adapter is mounted on ``base_url`` only.

    Requests to other hosts fall back to requests' stock adapters. When
    ``token`` is given it is sent as a bearer header on every request.
    """

    session = requests.Session()
    session.mount(
        base_url.rstrip("/") + "/",
        HTTPAdapter(
            pool_connections=HTTP_POOL_CONNECTIONS,
            pool_maxsize=HTTP_POOL_MAXSIZE,
            max_retries=_connect_retry(connect_retries),
        ),
    )
    session.headers["Accept"] = "application/json"
    session.headers["User-Agent"] = USER_AGENT
    if token:
        session.headers["Authorization"] = f"Bearer {token}"
    return session


@lru_cache(maxsize=1)
def get_default_session() -> requests.Session:
    """Shared session for the configured backend, built on first use."""

    return create_session(FIELD_API_BASE_URL, token=FIELD_API_TOKEN or None)
