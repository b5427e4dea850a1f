"""Shared pytest fixtures and test helpers for housectl tests."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any

import pluggy
import pytest
from click.testing import CliRunner
from sqlalchemy.engine import Engine

from housectl.config.settings import HouseSettings
from housectl.infrastructure.database.engine import init_database
from housectl.infrastructure.repository import Repository

hookimpl = pluggy.HookimplMarker("housectl")

# Smallest byte strings that pass image type detection.
PNG_BYTES = b"\x89PNG\r\n\x1a\n" + b"\x00" * 32
JPEG_BYTES = b"\xff\xd8\xff\xe0" + b"\x00" * 32


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep HOUSECTL_* variables from the developer shell out of tests."""
    for key in list(os.environ):
        if key.startswith("HOUSECTL_"):
            monkeypatch.delenv(key)


@pytest.fixture(autouse=True)
def _reset_telemetry() -> None:
    """`-v` CLI runs enable telemetry for the whole thread; switch it back off."""
    yield
    from housectl.services.telemetry import disable_telemetry

    disable_telemetry()


@pytest.fixture
def cli_runner() -> CliRunner:
    """Provide a Click CLI test runner."""
    return CliRunner()


@pytest.fixture
def db_engine(tmp_path: Path) -> Engine:
    """Initialized SQLite engine with all tables created."""
    engine = init_database(tmp_path)
    try:
        yield engine
    finally:
        engine.dispose()


@pytest.fixture
def repo(tmp_path: Path) -> Repository:
    """Repository on a temp data root, without an event bus."""
    r = Repository(HouseSettings.from_cli(data_root=tmp_path))
    try:
        yield r
    finally:
        r.close()


@pytest.fixture
def notices() -> NoticeRecorder:
    return NoticeRecorder()


@pytest.fixture
def notifying_repo(tmp_path: Path, notices: NoticeRecorder) -> Repository:
    """Repository with a synchronous event bus and a recording plugin."""
    r = Repository(HouseSettings.from_cli(data_root=tmp_path))
    r.init_event_bus(sync=True, plugins=[notices])
    try:
        yield r
    finally:
        r.close()


@pytest.fixture
def _isolated_root(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    """Change CWD to a temp directory so the CLI creates an isolated data root.

    Use via ``@pytest.mark.usefixtures("_isolated_root")`` on command test
    classes.
    """
    monkeypatch.chdir(tmp_path)


# ---------------------------------------------------------------------------
# Plugins used across test modules
# ---------------------------------------------------------------------------


class NoticeRecorder:
    """Plugin that records every housectl hook call."""

    def __init__(self) -> None:
        self.calls: list[tuple[str, dict[str, Any]]] = []

    def named(self, hook_name: str) -> list[dict[str, Any]]:
        return [payload for name, payload in self.calls if name == hook_name]

    @hookimpl
    def post_house_create(self, house_id: int, name: str, creator_id: int) -> None:
        self.calls.append(
            ("post_house_create", {"house_id": house_id, "name": name, "creator_id": creator_id})
        )

    @hookimpl
    def post_member_assign(
        self,
        house_id: int,
        user_id: int,
        role: int,
        inviter_id: int,
        activation: int,
    ) -> None:
        self.calls.append(
            (
                "post_member_assign",
                {
                    "house_id": house_id,
                    "user_id": user_id,
                    "role": role,
                    "inviter_id": inviter_id,
                    "activation": activation,
                },
            )
        )

    @hookimpl
    def post_member_remove(self, house_id: int, user_id: int, actor_id: int) -> None:
        self.calls.append(
            ("post_member_remove", {"house_id": house_id, "user_id": user_id, "actor_id": actor_id})
        )

    @hookimpl
    def send_house_invite_notice(
        self,
        to_email: str,
        to_name: str,
        house_name: str,
        inviter_name: str,
    ) -> None:
        self.calls.append(
            (
                "send_house_invite_notice",
                {
                    "to_email": to_email,
                    "to_name": to_name,
                    "house_name": house_name,
                    "inviter_name": inviter_name,
                },
            )
        )


class BrokenMailer:
    """Plugin whose invite delivery always fails."""

    @hookimpl
    def send_house_invite_notice(
        self,
        to_email: str,
        to_name: str,
        house_name: str,
        inviter_name: str,
    ) -> None:
        raise ConnectionRefusedError("smtp unreachable")


# ---------------------------------------------------------------------------
# Shared test helpers (used across service test modules)
# ---------------------------------------------------------------------------


def register_user(repo: Repository, name: str, email: str) -> int:
    """Register a user via UserService, asserting success. Returns the id."""
    from housectl.services.user import UserService

    result = UserService(repo).register(name, email)
    assert result.ok, result.error
    return result.data["user"]["id"]


def create_house(
    repo: Repository,
    creator_id: int,
    name: str = "Unit42",
    description: str = "desc",
    **kwargs: Any,
) -> int:
    """Create a house via MembershipService, asserting success. Returns the id."""
    from housectl.services.membership import MembershipService

    result = MembershipService(repo).create_house(name, description, creator_id=creator_id, **kwargs)
    assert result.ok, result.error
    return result.data["house"]["id"]


def assign(repo: Repository, house_id: int, inviter_id: int, email: str, role: int = 3) -> Any:
    """Assign a user via MembershipService, asserting success. Returns the data."""
    from housectl.services.membership import MembershipService

    result = MembershipService(repo).assign_user(
        house_id, inviter_id=inviter_id, user_email=email, role=role
    )
    assert result.ok, result.error
    return result.data
