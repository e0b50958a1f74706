from unittest.mock import MagicMock

import pytest
import requests

from inventory_monitor.utils import (
    HTTPError,
    RetryableHTTPError,
    retryable_request,
    wait_retry_after,
)
from tests.helpers import make_response


@retryable_request
def _get(session, url, **kwargs):
    return session.get(url, **kwargs)


def _retry_state(exc, attempt_number=1):
    state = MagicMock()
    state.outcome.exception.return_value = exc
    state.attempt_number = attempt_number
    return state


class TestWaitRetryAfter:
    def test_uses_server_delay(self):
        exc = RetryableHTTPError("throttled", status=429, retry_after=2.5)
        assert wait_retry_after(_retry_state(exc)) == 2.5

    def test_server_delay_is_capped(self):
        exc = RetryableHTTPError("throttled", status=429, retry_after=500)
        assert wait_retry_after(_retry_state(exc)) == 60

    def test_falls_back_to_exponential(self):
        assert wait_retry_after(_retry_state(requests.ConnectionError(), attempt_number=3)) == 4
        assert wait_retry_after(_retry_state(RetryableHTTPError("boom", status=502), attempt_number=1)) == 1


def test_throttled_request_is_retried_with_retry_after():
    session = MagicMock()
    session.get.side_effect = [
        make_response(429, headers={"Retry-After": "0"}),
        make_response(200, {"ok": True}),
    ]

    resp = _get(session, "https://discord.test/api/v10/users/@me")

    assert resp.status_code == 200
    assert session.get.call_count == 2


def test_client_error_is_not_retried():
    session = MagicMock()
    session.get.return_value = make_response(404)

    with pytest.raises(HTTPError) as excinfo:
        _get(session, "https://discord.test/api/v10/channels/1")

    assert excinfo.value.status == 404
    assert not isinstance(excinfo.value, RetryableHTTPError)
    assert session.get.call_count == 1
