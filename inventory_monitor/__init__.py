"""
Steam inventory monitoring service package.

This package contains modules for polling the Steam Community inventory
API, diffing per-account snapshots, notifying Discord and coordinating
the polling loop.  See README.md for details.
"""

__all__ = [
    "config",
    "diff",
    "health",
    "inventory",
    "main",
    "notifier",
    "scheduler",
    "state",
    "utils",
]
