"""Outbox-backed notice dispatch via pluggy + ThreadPoolExecutor.

Notices are written to the ``notice_outbox`` table before dispatch, so
every invite or lifecycle notice leaves a record of whether it was
delivered. Delivery is attempted exactly once; there are no retries.

INVARIANT: Plugin failures are warnings, never errors.
"""

from __future__ import annotations

import json
import logging
from concurrent.futures import Future, ThreadPoolExecutor
from typing import TYPE_CHECKING, Any

from sqlalchemy import insert, select, update

from housectl.domain.types import NoticeStatus
from housectl.infrastructure.clock import now_iso
from housectl.infrastructure.database.schema import notice_outbox

if TYPE_CHECKING:
    from sqlalchemy.engine import Engine

    from housectl.plugins.manager import PluginManager

logger = logging.getLogger(__name__)


class EventBus:
    """Outbox-backed dispatch of plugin hooks.

    Parameters:
        engine: SQLAlchemy engine with the ``notice_outbox`` table.
        plugin_manager: Loaded PluginManager for hook dispatch.
        sync: Force synchronous dispatch (useful for testing / ``--sync``).
        max_workers: ThreadPoolExecutor worker count.
    """

    def __init__(
        self,
        engine: Engine,
        plugin_manager: PluginManager,
        *,
        sync: bool = False,
        max_workers: int = 2,
    ) -> None:
        self._engine = engine
        self._pm = plugin_manager
        self._sync = sync
        self._executor: ThreadPoolExecutor | None = (
            None if sync else ThreadPoolExecutor(max_workers=max_workers)
        )
        self._futures: list[Future[None]] = []

    @property
    def plugin_manager(self) -> PluginManager:
        return self._pm

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def dispatch(self, hook_name: str, payload: dict[str, Any]) -> int:
        """Record the notice in the outbox, then dispatch async (or sync).

        Returns the outbox row id.
        """
        notice_id = self._write_outbox(hook_name, payload)

        if self._sync:
            self._execute_hook(notice_id, hook_name, payload)
        else:
            assert self._executor is not None
            future = self._executor.submit(self._execute_hook, notice_id, hook_name, payload)
            self._futures.append(future)

        return notice_id

    def status_of(self, notice_id: int) -> str:
        """Current outbox status for *notice_id*."""
        with self._engine.connect() as conn:
            return conn.execute(
                select(notice_outbox.c.status).where(notice_outbox.c.id == notice_id)
            ).scalar_one()

    def wait(self) -> None:
        """Block until every in-flight dispatch has finished."""
        for future in self._futures:
            try:
                future.result(timeout=30)
            except Exception:
                logger.debug("Notice dispatch future raised", exc_info=True)
        self._futures.clear()

    def shutdown(self) -> None:
        """Shutdown ThreadPoolExecutor, waiting for pending tasks."""
        self.wait()
        if self._executor is not None:
            self._executor.shutdown(wait=True)
            self._executor = None

    # ------------------------------------------------------------------
    # Internal
    # ------------------------------------------------------------------

    def _write_outbox(self, hook_name: str, payload: dict[str, Any]) -> int:
        with self._engine.begin() as conn:
            result = conn.execute(
                insert(notice_outbox).values(
                    hook_name=hook_name,
                    payload=json.dumps(payload),
                    status=NoticeStatus.PENDING,
                    created=now_iso(),
                )
            )
            assert result.lastrowid is not None
            return result.lastrowid

    def _execute_hook(self, notice_id: int, hook_name: str, payload: dict[str, Any]) -> None:
        """Attempt the hook once and record the outcome."""
        hook_fn = getattr(self._pm.hook, hook_name, None)
        if hook_fn is None:
            self._mark(notice_id, NoticeStatus.COMPLETED)
            return

        try:
            hook_fn(**payload)
        except Exception as exc:
            logger.warning("Hook %s failed: %s", hook_name, exc)
            self._mark(notice_id, NoticeStatus.FAILED, error=str(exc))
        else:
            self._mark(notice_id, NoticeStatus.COMPLETED)

    def _mark(self, notice_id: int, status: NoticeStatus, *, error: str | None = None) -> None:
        with self._engine.begin() as conn:
            conn.execute(
                update(notice_outbox)
                .where(notice_outbox.c.id == notice_id)
                .values(status=status, error=error, completed=now_iso())
            )
