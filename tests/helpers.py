from __future__ import annotations

from collections import Counter
from typing import Dict, List, Optional
from unittest.mock import MagicMock

import requests

from inventory_monitor.inventory import FetchError, TransportError


def make_response(status: int = 200, payload=None, json_error: bool = False, headers=None) -> MagicMock:
    resp = MagicMock()
    resp.status_code = status
    resp.headers = dict(headers or {})
    if json_error:
        resp.json.side_effect = ValueError("No JSON object could be decoded")
    else:
        resp.json.return_value = payload
    if status >= 400:
        resp.raise_for_status.side_effect = requests.HTTPError(f"{status} error")
    return resp


def inventory_payload(*names: str) -> Dict:
    """Build a Steam-style body with one asset per name."""
    classids: Dict[str, str] = {}
    assets: List[Dict] = []
    for i, name in enumerate(names):
        classid = classids.setdefault(name, str(1000 + len(classids)))
        assets.append({"assetid": str(i), "classid": classid, "instanceid": "0", "amount": "1"})
    descriptions = [
        {"classid": classid, "instanceid": "0", "market_hash_name": name}
        for name, classid in classids.items()
    ]
    return {"assets": assets, "descriptions": descriptions, "success": 1}


class FakeFetcher:
    """Replays scripted results per account: Counters or exceptions."""

    def __init__(self, script: Dict[str, List]) -> None:
        self.script = {k: list(v) for k, v in script.items()}
        self.calls: List[str] = []

    def __call__(self, account_id: str) -> Counter:
        self.calls.append(account_id)
        result = self.script[account_id].pop(0)
        if isinstance(result, Exception):
            raise result
        return Counter(result)


class FakeNotifier:
    def __init__(self, error: Optional[Exception] = None) -> None:
        self.sent = []
        self.error = error

    def notify(self, account_id, diff) -> bool:
        if self.error is not None:
            raise self.error
        self.sent.append((account_id, diff))
        return True


def network_failure(account_id: str) -> FetchError:
    return TransportError(account_id, "request failed: connection refused")
