"""Immutable value snapshots of persisted rows.

Stores return these instead of live row objects. Nothing mutates a
snapshot; changes go through explicit store methods, which return a
fresh snapshot.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, Self

from pydantic import BaseModel

from housectl.domain.types import LedgerKind


class _Snapshot(BaseModel):
    model_config = {"frozen": True}

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> Self:
        """Build a snapshot from a SQLAlchemy ``RowMapping``."""
        return cls.model_validate(dict(row))

    def to_payload(self) -> dict[str, Any]:
        """JSON-safe dict for ``ServiceResult.data``."""
        return self.model_dump(mode="json")


class User(_Snapshot):
    id: int
    name: str
    email: str
    created_at: str


class House(_Snapshot):
    id: int
    name: str
    description: str
    image: str | None = None
    created_by: int
    updated_by: int
    created_at: str
    updated_at: str


class Membership(_Snapshot):
    """One activation of a (house, user) pair.

    ``activation`` counts from 1 per pair; a removed member who is
    assigned again gets a new row with the next activation number.
    """

    id: int
    house_id: int
    user_id: int
    role: int
    active: bool
    activation: int
    created_at: str
    deactivated_at: str | None = None
    deactivated_by: int | None = None


class LedgerEntry(_Snapshot):
    id: int
    user_id: int
    house_id: int
    membership_id: int
    kind: LedgerKind
    value: int
    performed_by_user_id: int
    created_at: str
    updated_at: str
