"""Tests for immutable row snapshots and domain errors."""

import pytest
from pydantic import ValidationError

from housectl.domain.errors import (
    DuplicateMembership,
    HouseError,
    NotAMember,
    NotFound,
    OperationFailed,
    Unauthorized,
    UserNotFound,
    ValidationFailed,
)
from housectl.domain.models import LedgerEntry, Membership
from housectl.domain.types import LedgerKind

_MEMBERSHIP_ROW = {
    "id": 1,
    "house_id": 2,
    "user_id": 3,
    "role": 1,
    "active": 1,
    "activation": 1,
    "created_at": "2026-01-01T00:00:00+00:00",
    "deactivated_at": None,
    "deactivated_by": None,
}


class TestSnapshots:
    def test_from_row_coerces_sqlite_flag(self) -> None:
        m = Membership.from_row(_MEMBERSHIP_ROW)
        assert m.active is True

    def test_frozen(self) -> None:
        m = Membership.from_row(_MEMBERSHIP_ROW)
        with pytest.raises(ValidationError):
            m.active = False  # type: ignore[misc]

    def test_payload_is_json_safe(self) -> None:
        entry = LedgerEntry.from_row(
            {
                "id": 1,
                "user_id": 3,
                "house_id": 2,
                "membership_id": 1,
                "kind": "crate",
                "value": 0,
                "performed_by_user_id": 3,
                "created_at": "t",
                "updated_at": "t",
            }
        )
        assert entry.kind is LedgerKind.CRATE
        assert entry.to_payload()["kind"] == "crate"


class TestErrors:
    @pytest.mark.parametrize(
        ("exc", "code"),
        [
            (ValidationFailed(["bad"]), "VALIDATION_ERROR"),
            (Unauthorized("no"), "UNAUTHORIZED"),
            (NotFound("house", 7), "NOT_FOUND"),
            (UserNotFound("b@x.com"), "USER_NOT_FOUND"),
            (DuplicateMembership(1, 2), "DUPLICATE_MEMBERSHIP"),
            (NotAMember(1, 2), "NOT_A_MEMBER"),
            (OperationFailed("boom"), "OPERATION_FAILED"),
        ],
    )
    def test_codes(self, exc: HouseError, code: str) -> None:
        assert exc.code == code
        assert isinstance(exc, HouseError)

    def test_validation_joins_messages(self) -> None:
        exc = ValidationFailed(["a", "b"], field="name")
        assert exc.message == "a; b"
        assert exc.errors == ["a", "b"]
        assert exc.detail == {"field": "name"}

    def test_not_found_detail(self) -> None:
        exc = NotFound("house", 7)
        assert exc.message == "house 7 not found"
        assert exc.detail == {"resource": "house", "id": 7}

    def test_duplicate_detail(self) -> None:
        exc = DuplicateMembership(1, 2)
        assert exc.detail == {"house_id": 1, "user_id": 2}
