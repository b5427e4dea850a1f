"""Identity store — users resolvable by id or email.

Stands behind the identity-provider interface the membership core
consumes. Credentials and tokens are handled elsewhere.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from sqlalchemy import func, insert, select

from housectl.domain.errors import NotFound, UserNotFound, ValidationFailed
from housectl.domain.models import User
from housectl.domain.rules import validate_registration
from housectl.infrastructure.clock import now_iso
from housectl.infrastructure.database.schema import users

if TYPE_CHECKING:
    from sqlalchemy import Connection


def normalize_email(email: str) -> str:
    return email.strip().lower()


class IdentityStore:
    """Read and register user identities."""

    def __init__(self, conn: Connection) -> None:
        self._conn = conn

    def register(self, name: str, email: str) -> User:
        """Insert a new user.

        Raises:
            ValidationFailed: missing name, malformed email, or email taken.
        """
        vr = validate_registration(name, email)
        if not vr.valid:
            raise ValidationFailed(vr.errors)

        address = normalize_email(email)
        taken = self._conn.execute(
            select(users.c.id).where(func.lower(users.c.email) == address)
        ).first()
        if taken is not None:
            raise ValidationFailed(["email has already been taken"], email=address)

        result = self._conn.execute(
            insert(users).values(name=name.strip(), email=address, created_at=now_iso())
        )
        return self.get(int(result.inserted_primary_key[0]))

    def get(self, user_id: int) -> User:
        row = self._conn.execute(select(users).where(users.c.id == user_id)).mappings().first()
        if row is None:
            raise NotFound("user", user_id)
        return User.from_row(row)

    def get_many(self, user_ids: list[int]) -> dict[int, User]:
        if not user_ids:
            return {}
        rows = self._conn.execute(select(users).where(users.c.id.in_(user_ids))).mappings()
        return {int(row["id"]): User.from_row(row) for row in rows}

    def resolve_by_email(self, email: str) -> int:
        """Map an email address to a user id.

        Raises:
            UserNotFound: nobody is registered with that address.
        """
        row = self._conn.execute(
            select(users.c.id).where(func.lower(users.c.email) == normalize_email(email))
        ).first()
        if row is None:
            raise UserNotFound(email)
        return int(row.id)

    def name(self, user_id: int) -> str:
        return self.get(user_id).name

    def email(self, user_id: int) -> str:
        return self.get(user_id).email
