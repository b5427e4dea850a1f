"""UserService — registration and lookup of user identities."""

from __future__ import annotations

import logging

from sqlalchemy.exc import SQLAlchemyError

from housectl.domain.errors import HouseError
from housectl.services._helpers import fail, operation_failed
from housectl.services.base import BaseService
from housectl.services.result import ServiceResult
from housectl.services.telemetry import traced

logger = logging.getLogger(__name__)


class UserService(BaseService):
    """Identity operations. Credentials are out of scope."""

    @traced
    def register(self, name: str, email: str) -> ServiceResult:
        op = "register_user"
        try:
            with self._repo.transaction() as txn:
                user = txn.identity.register(name, email)
        except HouseError as exc:
            return fail(op, exc)
        except SQLAlchemyError as exc:
            return operation_failed(op, exc)

        logger.info("User %s registered", user.id)
        return ServiceResult(ok=True, op=op, data={"user": user.to_payload()})

    @traced
    def get(self, user_id: int) -> ServiceResult:
        op = "get_user"
        try:
            with self._repo.reader() as txn:
                user = txn.identity.get(user_id)
                house_count = len(txn.memberships.list_by_user(user_id))
        except HouseError as exc:
            return fail(op, exc)

        return ServiceResult(
            ok=True,
            op=op,
            data={"user": user.to_payload(), "house_count": house_count},
        )
