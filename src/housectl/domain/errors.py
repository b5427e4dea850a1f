"""Typed failures raised below the service boundary.

Stores, the registry, and the ledger initializer raise these inside a
transaction block so the transaction rolls back. Services convert them
into a failed ``ServiceResult`` carrying the same ``code``.
"""

from __future__ import annotations

from typing import Any


class HouseError(Exception):
    """Base class for all housectl domain failures."""

    code = "OPERATION_FAILED"

    def __init__(self, message: str, **detail: Any) -> None:
        super().__init__(message)
        self.message = message
        self.detail = detail


class ValidationFailed(HouseError):
    """Malformed or missing input."""

    code = "VALIDATION_ERROR"

    def __init__(self, errors: list[str], **detail: Any) -> None:
        super().__init__("; ".join(errors), **detail)
        self.errors = errors


class Unauthorized(HouseError):
    """The acting user lacks the membership or role the operation requires."""

    code = "UNAUTHORIZED"


class NotFound(HouseError):
    """A house, user, or membership record does not exist."""

    code = "NOT_FOUND"

    def __init__(self, resource: str, resource_id: Any) -> None:
        super().__init__(f"{resource} {resource_id!s} not found", resource=resource, id=resource_id)


class UserNotFound(HouseError):
    """An email address does not resolve to a registered user."""

    code = "USER_NOT_FOUND"

    def __init__(self, email: str) -> None:
        super().__init__(f"No user registered with email {email}", email=email)


class DuplicateMembership(HouseError):
    """The (house, user) pair already has an active membership."""

    code = "DUPLICATE_MEMBERSHIP"

    def __init__(self, house_id: int, user_id: int) -> None:
        super().__init__(
            f"User {user_id} already belongs to house {house_id}",
            house_id=house_id,
            user_id=user_id,
        )


class NotAMember(HouseError):
    """The target user is not an active member of the house."""

    code = "NOT_A_MEMBER"

    def __init__(self, house_id: int, user_id: int) -> None:
        super().__init__(
            f"User {user_id} does not belong to house {house_id}",
            house_id=house_id,
            user_id=user_id,
        )


class OperationFailed(HouseError):
    """An internal step failed and the whole operation was rolled back."""

    code = "OPERATION_FAILED"
