"""In-memory store of the last known inventory per account.

Nothing is persisted; a restart begins with an empty store and the
scheduler's baseline pass refills it.
"""

from __future__ import annotations

from collections import Counter
from typing import Dict, List, Mapping, Optional


class AccountStateStore:
    """Account id -> most recent successfully fetched snapshot.

    Entries are replaced wholesale and never removed.  The scheduler is
    the only writer.
    """

    def __init__(self) -> None:
        self._snapshots: Dict[str, Counter] = {}

    def get(self, account_id: str) -> Optional[Counter]:
        snapshot = self._snapshots.get(account_id)
        return Counter(snapshot) if snapshot is not None else None

    def update(self, account_id: str, snapshot: Mapping[str, int]) -> None:
        # Keep only positive counts; absent means zero.
        self._snapshots[account_id] = Counter(
            {name: n for name, n in snapshot.items() if n > 0}
        )

    def account_ids(self) -> List[str]:
        return list(self._snapshots)

    def __contains__(self, account_id: object) -> bool:
        return account_id in self._snapshots

    def __len__(self) -> int:
        return len(self._snapshots)


__all__ = ["AccountStateStore"]
