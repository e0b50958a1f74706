"""Polling loop that sweeps tracked accounts for inventory changes.

One sweep visits every account in order: fetch, diff against the stored
snapshot, notify on change, store the new snapshot.  Sweeps run on a
single thread, so a sweep never starts before the previous one finished
and the state store only ever has one writer.
"""
from __future__ import annotations

import enum
import logging
import time
from typing import Callable, Iterable, Optional

from .config import CHECK_INTERVAL_SECONDS
from .diff import diff_snapshots
from .inventory import FetchError, Snapshot, fetch_inventory
from .notifier import NotificationError, Notifier
from .state import AccountStateStore

logger = logging.getLogger(__name__)


class SchedulerState(enum.Enum):
    IDLE = "idle"
    SWEEPING = "sweeping"


class InventoryScheduler:
    def __init__(
        self,
        account_ids: Iterable[str],
        notifier: Notifier,
        *,
        fetch: Callable[[str], Snapshot] = fetch_inventory,
        store: Optional[AccountStateStore] = None,
        interval: float = CHECK_INTERVAL_SECONDS,
        sleep: Callable[[float], None] = time.sleep,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.account_ids = list(account_ids)
        self.notifier = notifier
        self.fetch = fetch
        self.store = store if store is not None else AccountStateStore()
        self.interval = interval
        self.sleep = sleep
        self.clock = clock
        self.state = SchedulerState.IDLE

    def run_baseline(self) -> int:
        """Seed the store for every account without diffing or notifying.

        Returns the number of accounts seeded.
        """
        logger.info("Performing initial inventory fetch for %d IDs...", len(self.account_ids))
        seeded = 0
        for account_id in self.account_ids:
            try:
                snapshot = self.fetch(account_id)
            except FetchError:
                logger.warning("Failed initial fetch for %s. Will try again later.", account_id)
                continue
            except Exception:
                logger.exception("Unexpected error during initial fetch for %s", account_id)
                continue
            self.store.update(account_id, snapshot)
            seeded += 1
        logger.info("Baseline stored for %d/%d IDs.", seeded, len(self.account_ids))
        return seeded

    def check_account(self, account_id: str) -> bool:
        """Run one sweep step for one account.

        Returns False when the fetch failed and the account was skipped.
        """
        try:
            current = self.fetch(account_id)
        except FetchError as e:
            logger.warning(
                "Inventory fetch failed for %s (status=%s), skipping this interval: %s",
                account_id, e.status, e,
            )
            return False

        previous = self.store.get(account_id)
        if previous is None:
            logger.info("No baseline yet for %s; storing %d items.", account_id, sum(current.values()))
            self.store.update(account_id, current)
            return True

        diff = diff_snapshots(previous, current)
        if diff:
            try:
                self.notifier.notify(account_id, diff)
            except NotificationError:
                logger.exception("Notification for %s was not delivered", account_id)
            except Exception:
                logger.exception("Unexpected error while notifying for %s", account_id)
        else:
            logger.debug("No inventory change for %s", account_id)

        self.store.update(account_id, current)
        return True

    def sweep(self) -> int:
        """Check every account once, in order.  Returns how many succeeded."""
        self.state = SchedulerState.SWEEPING
        logger.info("Starting inventory check for %d IDs...", len(self.account_ids))
        ok = 0
        try:
            for account_id in self.account_ids:
                try:
                    if self.check_account(account_id):
                        ok += 1
                except Exception:
                    logger.exception("Unexpected error while checking %s", account_id)
        finally:
            self.state = SchedulerState.IDLE
        logger.info("All inventory checks complete (%d/%d succeeded).", ok, len(self.account_ids))
        return ok

    def run_forever(self, max_sweeps: Optional[int] = None) -> None:
        """Sweep on a fixed-rate schedule.

        Ticks fall every ``interval`` seconds from the start of the loop.
        Ticks that pass while a sweep is running are dropped, so the next
        sweep waits for the first tick after the current one finished.
        """
        logger.info("Checking every %ss for %d IDs.", self.interval, len(self.account_ids))
        next_tick = self.clock() + self.interval
        sweeps = 0
        while max_sweeps is None or sweeps < max_sweeps:
            delay = next_tick - self.clock()
            if delay > 0:
                self.sleep(delay)
            self.sweep()
            sweeps += 1

            next_tick += self.interval
            now = self.clock()
            if now > next_tick:
                skipped = int((now - next_tick) // self.interval) + 1
                logger.warning("Sweep overran the interval; skipping %d tick(s).", skipped)
                next_tick += skipped * self.interval


__all__ = ["InventoryScheduler", "SchedulerState"]
