"""Multiset diff between two inventory snapshots."""
from __future__ import annotations

from collections import Counter
from dataclasses import dataclass
from typing import Iterable, Mapping, Tuple

ItemDelta = Tuple[str, int]


@dataclass(frozen=True)
class InventoryDiff:
    added: Tuple[ItemDelta, ...] = ()
    removed: Tuple[ItemDelta, ...] = ()

    def __bool__(self) -> bool:
        return bool(self.added or self.removed)


def count_items(names: Iterable[str]) -> Counter:
    """Build a snapshot from one name per owned copy."""
    return Counter(names)


def diff_snapshots(previous: Mapping[str, int], current: Mapping[str, int]) -> InventoryDiff:
    """Compare two snapshots by per-item counts.

    Items are visited in ``previous`` order, then items new in ``current``
    in their order, so repeated calls format identically.
    """
    added = []
    removed = []
    seen = set()
    for name in list(previous) + list(current):
        if name in seen:
            continue
        seen.add(name)
        old = previous.get(name, 0)
        new = current.get(name, 0)
        if new > old:
            added.append((name, new - old))
        elif old > new:
            removed.append((name, old - new))
    return InventoryDiff(added=tuple(added), removed=tuple(removed))


__all__ = ["InventoryDiff", "ItemDelta", "count_items", "diff_snapshots"]
