"""Helper utilities.

This module centralises common helper functions such as creating a
configured HTTP session and applying retry policies to network calls.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Dict, Optional

import requests
from requests import Response
from tenacity import (RetryCallState, after_log, retry, retry_if_exception_type,
                      stop_after_attempt, wait_exponential)

from .config import USER_AGENT

logger = logging.getLogger(__name__)


def get_http_session(headers: Optional[Dict[str, str]] = None) -> requests.Session:
    """Return a new HTTP session with sensible defaults.

    The session identifies itself with the bot's User-Agent and asks for
    JSON.  Extra headers (for example an Authorization header) are merged
    on top.  Caller is responsible for closing the session.
    """
    session = requests.Session()
    session.headers.update(
        {
            "User-Agent": USER_AGENT,
            "Accept": "application/json",
        }
    )
    if headers:
        session.headers.update(headers)
    return session


class HTTPError(Exception):
    """Raised when an HTTP request fails after retries."""

    def __init__(self, message: str, status: Optional[int] = None) -> None:
        super().__init__(message)
        self.status = status


class RetryableHTTPError(HTTPError):
    """Server-side or throttling failure (5xx, 429) worth another attempt."""

    def __init__(self, message: str, status: Optional[int] = None, retry_after: Optional[float] = None) -> None:
        super().__init__(message, status=status)
        self.retry_after = retry_after


# Upper bound on a server-requested Retry-After delay.
MAX_RETRY_AFTER_SECONDS = 60.0

_exponential_wait = wait_exponential(multiplier=1, min=1, max=10)


def _parse_retry_after(resp: Response) -> Optional[float]:
    try:
        return float(resp.headers.get("Retry-After"))
    except (TypeError, ValueError):
        return None


def wait_retry_after(retry_state: RetryCallState) -> float:
    """Wait as long as the server asked for, else back off exponentially."""
    exc = retry_state.outcome.exception() if retry_state.outcome else None
    retry_after = getattr(exc, "retry_after", None)
    if retry_after is not None:
        return min(max(retry_after, 0.0), MAX_RETRY_AFTER_SECONDS)
    return _exponential_wait(retry_state)


def _raise_for_status(resp: Response) -> None:
    try:
        resp.raise_for_status()
    except requests.RequestException as e:
        raise HTTPError(str(e), status=resp.status_code) from e


def retryable_request(method: Callable[[requests.Session, str, Dict[str, Any]], Response]) -> Callable[..., Response]:
    """Decorator factory to apply retry logic to HTTP calls.

    The decorated function must accept a `requests.Session` as its first
    argument, followed by URL and optional kwargs, and return a
    `requests.Response`.  Retries are attempted for network errors,
    throttling (429) and server errors (status >= 500).  Other 4xx
    responses raise `HTTPError` straight away.  A maximum of 5 attempts
    are made, waiting for the server's Retry-After when it sends one and
    backing off exponentially between 1 and 10 seconds otherwise.
    """

    @retry(
        reraise=True,
        stop=stop_after_attempt(5),
        wait=wait_retry_after,
        retry=(
            retry_if_exception_type(requests.ConnectionError)
            | retry_if_exception_type(requests.Timeout)
            | retry_if_exception_type(RetryableHTTPError)
        ),
        after=after_log(logger, logging.WARNING),
    )
    def wrapper(session: requests.Session, url: str, **kwargs: Any) -> Response:
        response = method(session, url, **kwargs)
        if response.status_code >= 500 or response.status_code == 429:
            raise RetryableHTTPError(
                f"Server returned status {response.status_code}",
                status=response.status_code,
                retry_after=_parse_retry_after(response),
            )
        _raise_for_status(response)
        return response

    return wrapper


__all__ = ["get_http_session", "retryable_request", "wait_retry_after", "HTTPError", "RetryableHTTPError"]
