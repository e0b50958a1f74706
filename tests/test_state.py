from collections import Counter

from inventory_monitor.state import AccountStateStore


def test_unknown_account_has_no_state():
    store = AccountStateStore()
    assert store.get("1") is None
    assert "1" not in store
    assert len(store) == 0


def test_update_replaces_wholesale():
    store = AccountStateStore()
    store.update("1", Counter({"A": 2, "B": 1}))
    store.update("1", Counter({"C": 1}))
    assert store.get("1") == Counter({"C": 1})
    assert store.account_ids() == ["1"]


def test_stored_snapshot_is_a_copy():
    store = AccountStateStore()
    snap = Counter({"A": 1})
    store.update("1", snap)
    snap["A"] += 5
    store.get("1")["B"] = 1
    assert store.get("1") == Counter({"A": 1})


def test_non_positive_counts_are_dropped():
    store = AccountStateStore()
    store.update("1", Counter({"A": 0, "B": -1, "C": 2}))
    assert dict(store.get("1")) == {"C": 2}
