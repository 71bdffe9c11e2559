# Bounded-retry HTTP helper shared by the GitHub and Gemini clients.

from __future__ import annotations

import logging
import time
from typing import Any, Callable

import httpx

from detector.errors import ExternalServiceError, NotFound, RateLimited, ValidationError

logger = logging.getLogger(__name__)

RETRYABLE_STATUS = frozenset({429, 500, 502, 503, 504})


def _is_rate_limited(response: httpx.Response) -> bool:
    if response.status_code == 429:
        return True
    return response.status_code == 403 and response.headers.get("x-ratelimit-remaining") == "0"


def raise_for_service_error(response: httpx.Response, what: str) -> None:
    """Translate an unsuccessful response into the detector's error taxonomy."""
    if response.is_success:
        return
    status = response.status_code
    detail = response.text[:200]
    if status == 404:
        raise NotFound(f"{what}: not found", status_code=status)
    if _is_rate_limited(response):
        raise RateLimited(f"{what}: rate limited", status_code=status)
    if status == 422:
        raise ValidationError(f"{what}: rejected ({detail})", status_code=status)
    raise ExternalServiceError(f"{what}: HTTP {status} ({detail})", status_code=status)


def request_with_retry(
    client: httpx.Client,
    method: str,
    url: str,
    *,
    what: str,
    max_retries: int = 2,
    backoff: float = 1.0,
    sleep: Callable[[float], None] = time.sleep,
    **kwargs: Any,
) -> httpx.Response:
    """
    Send a request, retrying transport errors, 429 and 5xx at most max_retries times.

    Waits backoff * 2**attempt seconds between attempts. The final failure is
    raised as an ExternalServiceError subclass; any other 4xx is raised at once.
    """
    attempt = 0
    while True:
        try:
            response = client.request(method, url, **kwargs)
        except httpx.TransportError as exc:
            if attempt >= max_retries:
                raise ExternalServiceError(f"{what}: {type(exc).__name__}: {exc}") from exc
            logger.warning("%s failed (%s); retry %d/%d", what, type(exc).__name__, attempt + 1, max_retries)
        else:
            retryable = response.status_code in RETRYABLE_STATUS or _is_rate_limited(response)
            if not retryable or attempt >= max_retries:
                raise_for_service_error(response, what)
                return response
            logger.warning("%s returned HTTP %d; retry %d/%d", what, response.status_code, attempt + 1, max_retries)
        sleep(backoff * (2**attempt))
        attempt += 1
