"""Steam Community inventory fetcher.

Retrieves one account's inventory and collapses it into a multiset of
item names (``market_hash_name``), owning the retry/backoff policy for
that single account.
"""
from __future__ import annotations

import logging
import time
from collections import Counter
from typing import Any, Callable, Dict, Iterable, Optional, Tuple

import requests
from tenacity import RetryCallState, Retrying, retry_if_exception_type, stop_after_attempt

from .config import (
    APPID,
    BACKOFF_BASE_SECONDS,
    CONTEXTID,
    INVENTORY_BASE_URL,
    INVENTORY_COUNT,
    INVENTORY_LANGUAGE,
    MAX_RETRIES,
    REQUEST_TIMEOUT_SECONDS,
    TRANSPORT_RETRY_DELAY_SECONDS,
)
from .utils import get_http_session

logger = logging.getLogger(__name__)

# Item name -> number of copies owned.
Snapshot = Counter


class FetchError(Exception):
    """An inventory could not be fetched for this sweep."""

    def __init__(self, account_id: str, message: str, status: Optional[int] = None) -> None:
        super().__init__(f"{account_id}: {message}")
        self.account_id = account_id
        self.status = status


class RateLimitedError(FetchError):
    """Steam answered 429 Too Many Requests."""


class InventoryHTTPError(FetchError):
    """Non-success status other than 429."""


class TransportError(FetchError):
    """Connection failure or timeout before any status was received."""


class MalformedResponseError(FetchError):
    """Body was not a JSON object."""


def build_inventory_url(
    account_id: str,
    *,
    base_url: str = INVENTORY_BASE_URL,
    app_id: int = APPID,
    context_id: int = CONTEXTID,
) -> str:
    return f"{base_url.rstrip('/')}/{account_id}/{app_id}/{context_id}"


def _description_key(record: Dict[str, Any]) -> Tuple[str, str]:
    return str(record.get("classid")), str(record.get("instanceid", "0"))


def parse_inventory(payload: Dict[str, Any]) -> Snapshot:
    """Turn an inventory response body into a Snapshot.

    Every asset is one owned copy; it is resolved to a name through the
    description sharing its (classid, instanceid).  Assets that resolve to
    nothing are dropped.  A body without both lists is an empty inventory.
    """
    assets = payload.get("assets")
    descriptions = payload.get("descriptions")
    if not isinstance(assets, list) or not isinstance(descriptions, list):
        return Snapshot()

    names: Dict[Tuple[str, str], str] = {}
    for desc in descriptions:
        if not isinstance(desc, dict):
            continue
        name = desc.get("market_hash_name")
        if name:
            names.setdefault(_description_key(desc), str(name))

    return Snapshot(_resolve_names(assets, names))


def _resolve_names(assets: Iterable[Any], names: Dict[Tuple[str, str], str]) -> Iterable[str]:
    for asset in assets:
        if not isinstance(asset, dict):
            continue
        name = names.get(_description_key(asset))
        if name is not None:
            yield name


def _request_inventory(
    session: requests.Session,
    account_id: str,
    url: str,
    params: Dict[str, Any],
    timeout: float,
) -> Snapshot:
    """Single attempt; classifies every failure as a FetchError subclass."""
    try:
        resp = session.get(url, params=params, timeout=timeout)
    except requests.RequestException as e:
        raise TransportError(account_id, f"request failed: {e}") from e

    if resp.status_code == 429:
        raise RateLimitedError(account_id, "rate limited (HTTP 429)", status=429)
    if not 200 <= resp.status_code < 300:
        raise InventoryHTTPError(
            account_id, f"HTTP error {resp.status_code}", status=resp.status_code
        )

    try:
        data = resp.json()
    except ValueError as e:
        raise MalformedResponseError(
            account_id, "response body is not JSON", status=resp.status_code
        ) from e
    if not isinstance(data, dict):
        raise MalformedResponseError(
            account_id, "response body is not a JSON object", status=resp.status_code
        )
    return parse_inventory(data)


def _backoff_wait(backoff_base: float, transport_delay: float) -> Callable[[RetryCallState], float]:
    def wait(retry_state: RetryCallState) -> float:
        exc = retry_state.outcome.exception() if retry_state.outcome else None
        if isinstance(exc, RateLimitedError):
            return backoff_base * 2 ** (retry_state.attempt_number - 1)
        return transport_delay

    return wait


def _log_retry(account_id: str, max_attempts: int) -> Callable[[RetryCallState], None]:
    def before_sleep(retry_state: RetryCallState) -> None:
        exc = retry_state.outcome.exception() if retry_state.outcome else None
        delay = retry_state.next_action.sleep if retry_state.next_action else 0
        logger.warning(
            "Fetch attempt %d/%d for %s failed (status=%s): %s; retrying in %.0fs",
            retry_state.attempt_number,
            max_attempts,
            account_id,
            getattr(exc, "status", None),
            exc,
            delay,
        )

    return before_sleep


def fetch_inventory(
    account_id: str,
    *,
    session: Optional[requests.Session] = None,
    base_url: str = INVENTORY_BASE_URL,
    app_id: int = APPID,
    context_id: int = CONTEXTID,
    language: str = INVENTORY_LANGUAGE,
    count: int = INVENTORY_COUNT,
    max_attempts: int = MAX_RETRIES,
    backoff_base: float = BACKOFF_BASE_SECONDS,
    transport_delay: float = TRANSPORT_RETRY_DELAY_SECONDS,
    timeout: float = REQUEST_TIMEOUT_SECONDS,
    sleep: Callable[[float], None] = time.sleep,
) -> Snapshot:
    """Fetch the current inventory of one account.

    Rate-limited attempts back off exponentially, transport failures wait
    a fixed delay, and every other failure is raised at once.  Once
    ``max_attempts`` requests have been made the last error is raised.

    Raises:
        FetchError: the inventory could not be retrieved.  An account that
            owns nothing yields an empty Snapshot instead.
    """
    url = build_inventory_url(account_id, base_url=base_url, app_id=app_id, context_id=context_id)
    params = {"l": language, "count": count}

    close_session = False
    if session is None:
        session = get_http_session()
        close_session = True

    retrying = Retrying(
        reraise=True,
        stop=stop_after_attempt(max_attempts),
        wait=_backoff_wait(backoff_base, transport_delay),
        retry=retry_if_exception_type((RateLimitedError, TransportError)),
        before_sleep=_log_retry(account_id, max_attempts),
        sleep=sleep,
    )
    try:
        items = retrying(_request_inventory, session, account_id, url, params, timeout)
    except FetchError as e:
        logger.info("Fetch failed for %s (status=%s): %s", account_id, e.status, e)
        raise
    finally:
        if close_session:
            session.close()

    logger.info("Fetched items count for %s: %d", account_id, sum(items.values()))
    return items


__all__ = [
    "Snapshot",
    "FetchError",
    "RateLimitedError",
    "InventoryHTTPError",
    "TransportError",
    "MalformedResponseError",
    "build_inventory_url",
    "parse_inventory",
    "fetch_inventory",
]
