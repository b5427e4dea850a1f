"""Input rules for houses, roles, and users.

Each ``validate_*`` function returns a :class:`ValidationResult`; callers
decide whether to raise. Limits mirror the house form constraints.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field

from housectl.domain.types import MAX_ROLE, MIN_ROLE

NAME_MIN_LENGTH = 4
NAME_MAX_LENGTH = 56
DESCRIPTION_MAX_LENGTH = 280

# local@domain.tld, no whitespace.
_EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")


@dataclass(frozen=True)
class ValidationResult:
    """Result of an input validation check."""

    valid: bool
    errors: list[str] = field(default_factory=list)


def _result(errors: list[str]) -> ValidationResult:
    return ValidationResult(valid=not errors, errors=errors)


def _name_errors(name: str) -> list[str]:
    length = len(name.strip())
    if length < NAME_MIN_LENGTH or length > NAME_MAX_LENGTH:
        return [
            f"name must be between {NAME_MIN_LENGTH} and {NAME_MAX_LENGTH} characters"
        ]
    return []


def _description_errors(description: str) -> list[str]:
    if len(description) > DESCRIPTION_MAX_LENGTH:
        return [f"description may not exceed {DESCRIPTION_MAX_LENGTH} characters"]
    return []


def validate_house_create(name: str | None, description: str | None) -> ValidationResult:
    """Name and description are required on creation."""
    errors: list[str] = []
    if not name or not name.strip():
        errors.append("name is required")
    else:
        errors.extend(_name_errors(name))
    if not description or not description.strip():
        errors.append("description is required")
    else:
        errors.extend(_description_errors(description))
    return _result(errors)


def validate_house_patch(
    name: str | None = None,
    description: str | None = None,
) -> ValidationResult:
    """Only supplied fields are checked."""
    errors: list[str] = []
    if name is not None:
        errors.extend(_name_errors(name))
    if description is not None:
        errors.extend(_description_errors(description))
    return _result(errors)


def is_valid_email(email: str | None) -> bool:
    return bool(email) and _EMAIL_RE.match(email or "") is not None


def validate_assignment(user_email: str | None, role: object) -> ValidationResult:
    """Role must be an integer in [1, 9]; the email must be well formed."""
    errors: list[str] = []
    if not is_valid_email(user_email):
        errors.append("user_email must be a valid email address")
    if isinstance(role, bool) or not isinstance(role, int):
        errors.append("role must be an integer")
    elif not MIN_ROLE <= role <= MAX_ROLE:
        errors.append(f"role must be between {MIN_ROLE} and {MAX_ROLE}")
    return _result(errors)


def validate_registration(name: str | None, email: str | None) -> ValidationResult:
    errors: list[str] = []
    if not name or not name.strip():
        errors.append("name is required")
    if not is_valid_email(email):
        errors.append("email must be a valid email address")
    return _result(errors)
