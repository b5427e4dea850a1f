"""BaseService — abstract foundation for all housectl services.

Every service receives a :class:`Repository` at construction time. The
Repository provides transactional access to the database and avatar files.
Services own their transaction boundaries via ``self._repo.transaction()``.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from housectl.infrastructure.repository import Repository

logger = logging.getLogger(__name__)


class BaseService:
    """Abstract base for all service-layer classes.

    Usage::

        class MembershipService(BaseService):
            def create_house(self, name: str, ...) -> ServiceResult:
                with self._repo.transaction() as txn:
                    ...
    """

    def __init__(self, repo: Repository) -> None:
        self._repo = repo

    def _dispatch_event(
        self,
        hook_name: str,
        payload: dict[str, Any],
        warnings: list[str],
    ) -> int | None:
        """Dispatch a hook through the event bus. No-op if the bus is not initialized.

        Returns the outbox id of the dispatched notice, if any.

        INVARIANT: Plugin failures are warnings, never errors.
        """
        bus = self._repo.event_bus
        if bus is None:
            return None
        try:
            return bus.dispatch(hook_name, payload)
        except Exception:
            logger.warning("Event dispatch failed for %s", hook_name, exc_info=True)
            warnings.append(f"Event dispatch failed for {hook_name}")
            return None
