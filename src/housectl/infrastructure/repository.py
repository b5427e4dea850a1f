"""Repository — transaction coordination for houses, members, and ledgers.

The Repository is the single dependency injected into every service. It
owns the database engine, the image storage, and the plugin event bus.
The :meth:`transaction` context manager coordinates DB + file writes so
that if any step fails, they all roll back:

- **DB**: Native SQLAlchemy ``engine.begin()`` with auto-commit/rollback.
- **Files**: Compensation-based — newly created avatar files are deleted,
  overwritten files are restored from backup, on rollback.
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from dataclasses import dataclass, field
from functools import cached_property
from typing import TYPE_CHECKING, Any

from housectl.infrastructure.database.engine import DATA_DIRNAME, init_database
from housectl.infrastructure.repositories import (
    HouseRegistry,
    IdentityStore,
    LedgerInitializer,
    MembershipStore,
)
from housectl.infrastructure.storage import ImageStorage

if TYPE_CHECKING:
    from collections.abc import Iterator
    from pathlib import Path

    from sqlalchemy import Connection
    from sqlalchemy.engine import Engine

    from housectl.config.settings import HouseSettings

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# File operation tracking for compensation-based rollback
# ---------------------------------------------------------------------------


@dataclass
class _FileOp:
    """A tracked file write within a repository transaction."""

    path: Path
    backup: bytes | None  # original content for overwrites, None for creates

    def rollback(self) -> None:
        """Undo this file operation (best-effort)."""
        try:
            if self.backup is not None:
                self.path.write_bytes(self.backup)
            else:
                self.path.unlink(missing_ok=True)
        except OSError:
            logger.warning("Failed to rollback file operation: %s", self.path)


# ---------------------------------------------------------------------------
# RepositoryTransaction — yielded to callers within transaction()
# ---------------------------------------------------------------------------


@dataclass
class RepositoryTransaction:
    """Active transaction context with DB connection, stores, and tracked file I/O.

    All file writes must go through :meth:`write_bytes` so the Repository
    can compensate on rollback.
    """

    conn: Connection
    _repo: Repository
    _file_ops: list[_FileOp] = field(default_factory=list, repr=False)

    @cached_property
    def houses(self) -> HouseRegistry:
        return HouseRegistry(self.conn)

    @cached_property
    def memberships(self) -> MembershipStore:
        return MembershipStore(self.conn)

    @cached_property
    def ledger(self) -> LedgerInitializer:
        return LedgerInitializer(self.conn)

    @cached_property
    def identity(self) -> IdentityStore:
        return IdentityStore(self.conn)

    def write_bytes(self, path: Path, data: bytes) -> None:
        """Write *data* to *path*, tracking for rollback.

        If the file already exists, its current content is backed up.
        Parent directories are created as needed.
        """
        backup: bytes | None = None
        if path.exists():
            backup = path.read_bytes()

        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(data)
        self._file_ops.append(_FileOp(path=path, backup=backup))

    def store_image(self, data: bytes) -> str:
        """Validate and store an avatar; returns its reference."""
        return self._repo.images.store(self, data)


# ---------------------------------------------------------------------------
# Repository
# ---------------------------------------------------------------------------


class Repository:
    """Encapsulates database and image storage access.

    Constructed once at CLI startup from :class:`HouseSettings` and stored
    on the Click context object. Services receive the Repository via their
    :class:`BaseService` constructor.
    """

    def __init__(self, settings: HouseSettings) -> None:
        self._settings = settings
        self._engine: Engine = init_database(
            self.root, busy_timeout=settings.database.busy_timeout
        )
        self._images = ImageStorage(
            self.root,
            max_kb=settings.storage.max_image_kb,
            allowed_types=tuple(settings.storage.allowed_image_types),
        )
        self._event_bus: Any | None = None

    @property
    def root(self) -> Path:
        """The data root directory."""
        return self._settings.data_root

    @property
    def engine(self) -> Engine:
        """The underlying SQLAlchemy engine (for direct access when needed)."""
        return self._engine

    @property
    def settings(self) -> HouseSettings:
        return self._settings

    @property
    def images(self) -> ImageStorage:
        return self._images

    @property
    def event_bus(self) -> Any | None:
        """The plugin event bus (None if not initialized)."""
        return self._event_bus

    def init_event_bus(self, *, sync: bool = False, plugins: list[object] | None = None) -> None:
        """Initialize the plugin event bus.

        Creates a PluginManager, discovers entry-point and local plugins,
        registers the built-in MailPlugin plus any *plugins* given, and
        wires up the EventBus.
        """
        from housectl.plugins.builtins.mail import MailPlugin
        from housectl.plugins.event_bus import EventBus
        from housectl.plugins.manager import PluginManager

        pm = PluginManager()
        pm.discover_and_load(local_dir=self.root / DATA_DIRNAME / "plugins")
        pm.register_plugin(MailPlugin(config=self._settings.notify), name="mail-builtin")
        for plugin in plugins or []:
            pm.register_plugin(plugin)

        self._event_bus = EventBus(self._engine, pm, sync=sync)

    def close(self) -> None:
        """Shut down the event bus and release pooled connections."""
        if self._event_bus is not None:
            self._event_bus.shutdown()
        self._engine.dispose()

    @contextmanager
    def transaction(self) -> Iterator[RepositoryTransaction]:
        """Coordinated transaction across DB and avatar files.

        - DB writes use a native SQLAlchemy transaction (commit on
          success, rollback on exception).
        - File writes are tracked for compensation — on failure, created
          files are deleted and overwritten files are restored.

        Usage::

            with repo.transaction() as txn:
                house = txn.houses.create(...)
                txn.memberships.create(house.id, creator_id, OWNER_ROLE)
                # Both commit on success, both roll back on failure.
        """
        file_ops: list[_FileOp] = []
        with self._engine.begin() as conn:
            txn = RepositoryTransaction(conn=conn, _repo=self, _file_ops=file_ops)
            try:
                yield txn
            except BaseException:
                for op in reversed(file_ops):
                    op.rollback()
                raise

    @contextmanager
    def reader(self) -> Iterator[RepositoryTransaction]:
        """Read-only access to the stores (rolled back on exit)."""
        with self._engine.connect() as conn:
            yield RepositoryTransaction(conn=conn, _repo=self)
