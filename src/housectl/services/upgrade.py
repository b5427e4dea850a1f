"""UpgradeService — database migration with Alembic.

Pipeline: BACKUP → MIGRATE → REPORT
"""

from __future__ import annotations

import logging
import shutil
from typing import TYPE_CHECKING, Any

from alembic import command
from alembic.runtime.migration import MigrationContext
from alembic.script import ScriptDirectory
from sqlalchemy import inspect

from housectl.infrastructure.clock import now_compact
from housectl.infrastructure.database.engine import DATA_DIRNAME, db_path_for
from housectl.infrastructure.database.migrations import build_config, db_url_for, stamp_head
from housectl.services.base import BaseService
from housectl.services.result import ServiceError, ServiceResult

if TYPE_CHECKING:
    from pathlib import Path

logger = logging.getLogger(__name__)


class UpgradeService(BaseService):
    """Handles database schema migrations via Alembic."""

    def _tables_exist(self) -> bool:
        """Check if core tables exist (databases created before version tracking)."""
        return "memberships" in inspect(self._repo.engine).get_table_names()

    def _backup_db(self) -> Path:
        backup_dir = self._repo.root / DATA_DIRNAME / "backups"
        backup_dir.mkdir(parents=True, exist_ok=True)
        target = backup_dir / f"housectl-{now_compact()}.db"
        shutil.copy2(db_path_for(self._repo.root), target)
        return target

    def check_pending(self) -> ServiceResult:
        """List pending migrations without applying."""
        op = "upgrade"

        try:
            cfg = build_config(db_url_for(self._repo.root))
            script = ScriptDirectory.from_config(cfg)
            head = script.get_current_head()

            with self._repo.engine.connect() as conn:
                current = MigrationContext.configure(conn).get_current_revision()

            pending: list[dict[str, Any]] = []
            if current != head and head is not None:
                rev_obj = script.get_revision(head)
                while rev_obj is not None and rev_obj.revision != current:
                    pending.append({"revision": rev_obj.revision, "description": rev_obj.doc or ""})
                    down = rev_obj.down_revision
                    if down is None:
                        break
                    rev_obj = script.get_revision(str(down))

            return ServiceResult(
                ok=True,
                op=op,
                data={
                    "pending_count": len(pending),
                    "pending": pending,
                    "current": current,
                    "head": head,
                },
            )
        except Exception as exc:
            logger.debug("Migration check failed", exc_info=True)
            return ServiceResult(
                ok=False,
                op=op,
                error=ServiceError(
                    code="CHECK_FAILED",
                    message=f"Failed to check migrations: {exc}",
                ),
            )

    def apply(self) -> ServiceResult:
        """BACKUP → MIGRATE → REPORT pipeline."""
        op = "upgrade"

        check_result = self.check_pending()
        if not check_result.ok:
            return check_result

        pending_count = check_result.data["pending_count"]
        if pending_count == 0:
            return ServiceResult(
                ok=True,
                op=op,
                data={
                    "applied_count": 0,
                    "current": check_result.data["head"],
                    "message": "Database is already up to date",
                },
            )

        try:
            backup_path = self._backup_db()
        except OSError as exc:
            return ServiceResult(
                ok=False,
                op=op,
                error=ServiceError(code="BACKUP_FAILED", message=f"Backup failed: {exc}"),
            )

        try:
            if check_result.data.get("current") is None and self._tables_exist():
                # Tables were created from metadata; record them as at head.
                stamp_head(self._repo.root)
            else:
                command.upgrade(build_config(db_url_for(self._repo.root)), "head")
        except Exception as exc:
            logger.error("Migration failed", exc_info=True)
            return ServiceResult(
                ok=False,
                op=op,
                error=ServiceError(
                    code="MIGRATION_FAILED",
                    message=f"Migration failed: {exc}. Backup at: {backup_path}",
                    detail={"backup_path": str(backup_path)},
                ),
            )

        return ServiceResult(
            ok=True,
            op=op,
            data={
                "applied_count": pending_count,
                "current": check_result.data["head"],
                "backup_path": str(backup_path),
            },
        )
