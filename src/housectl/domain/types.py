"""Ledger kinds and role bounds.

Roles are ordered capability levels: 1 is the highest (owner), 9 the lowest.
"""

from __future__ import annotations

from enum import StrEnum

OWNER_ROLE = 1
MIN_ROLE = 1
MAX_ROLE = 9


class LedgerKind(StrEnum):
    """The two zero-initialised entries every membership activation owns."""

    CRATE = "crate"
    BEER = "beer"


class NoticeStatus(StrEnum):
    """Delivery state of an outbox notice."""

    PENDING = "pending"
    COMPLETED = "completed"
    FAILED = "failed"
