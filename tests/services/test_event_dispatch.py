"""Integration tests — event dispatch from services to plugins."""

from __future__ import annotations

import json
from pathlib import Path

import pytest
from sqlalchemy import select

from housectl.config.settings import HouseSettings
from housectl.infrastructure.database.schema import notice_outbox
from housectl.infrastructure.repository import Repository
from housectl.plugins.event_bus import EventBus
from housectl.plugins.manager import PluginManager
from housectl.services.house import HouseService
from housectl.services.membership import MembershipService
from tests.conftest import BrokenMailer, NoticeRecorder, assign, create_house, register_user

# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


def _repo_with_plugin(root: Path, plugin: object, *, sync: bool = True) -> Repository:
    repo = Repository(HouseSettings.from_cli(data_root=root))
    pm = PluginManager()
    pm.register_plugin(plugin, name="under-test")
    repo._event_bus = EventBus(repo.engine, pm, sync=sync)
    return repo


@pytest.fixture
def recorder() -> NoticeRecorder:
    return NoticeRecorder()


@pytest.fixture
def repo_with_events(tmp_path: Path, recorder: NoticeRecorder) -> Repository:
    repo = _repo_with_plugin(tmp_path, recorder)
    try:
        yield repo
    finally:
        repo.close()


@pytest.fixture
def repo_with_broken_mailer(tmp_path: Path) -> Repository:
    repo = _repo_with_plugin(tmp_path, BrokenMailer())
    try:
        yield repo
    finally:
        repo.close()


def _outbox(repo: Repository) -> list[dict]:
    with repo.engine.connect() as conn:
        rows = conn.execute(select(notice_outbox).order_by(notice_outbox.c.id)).mappings().all()
    return [dict(r) for r in rows]


# ---------------------------------------------------------------------------
# Tests — MembershipService dispatch
# ---------------------------------------------------------------------------


class TestMembershipEventDispatch:
    def test_post_house_create_dispatched(
        self, repo_with_events: Repository, recorder: NoticeRecorder
    ) -> None:
        ada = register_user(repo_with_events, "Ada", "a@x.com")
        house_id = create_house(repo_with_events, ada, "Unit42")

        assert recorder.calls == [
            ("post_house_create", {"house_id": house_id, "name": "Unit42", "creator_id": ada})
        ]

    def test_assign_dispatches_lifecycle_then_notice(
        self, repo_with_events: Repository, recorder: NoticeRecorder
    ) -> None:
        ada = register_user(repo_with_events, "Ada", "a@x.com")
        register_user(repo_with_events, "Bob", "b@x.com")
        house_id = create_house(repo_with_events, ada)
        recorder.calls.clear()

        assign(repo_with_events, house_id, ada, "b@x.com", role=4)

        assert [name for name, _ in recorder.calls] == [
            "post_member_assign",
            "send_house_invite_notice",
        ]
        assert recorder.named("post_member_assign")[0]["role"] == 4

    def test_failed_operation_dispatches_nothing(
        self, repo_with_events: Repository, recorder: NoticeRecorder
    ) -> None:
        ada = register_user(repo_with_events, "Ada", "a@x.com")
        house_id = create_house(repo_with_events, ada)
        recorder.calls.clear()

        result = MembershipService(repo_with_events).assign_user(
            house_id, inviter_id=ada, user_email="ghost@x.com", role=3
        )
        assert not result.ok
        assert recorder.calls == []

    def test_house_update_dispatches_nothing(
        self, repo_with_events: Repository, recorder: NoticeRecorder
    ) -> None:
        ada = register_user(repo_with_events, "Ada", "a@x.com")
        house_id = create_house(repo_with_events, ada)
        recorder.calls.clear()

        assert HouseService(repo_with_events).update(house_id, actor_id=ada, name="Renamed").ok
        assert recorder.calls == []


# ---------------------------------------------------------------------------
# Tests — outbox records
# ---------------------------------------------------------------------------


class TestOutboxRecords:
    def test_every_dispatch_is_recorded(self, repo_with_events: Repository) -> None:
        ada = register_user(repo_with_events, "Ada", "a@x.com")
        register_user(repo_with_events, "Bob", "b@x.com")
        house_id = create_house(repo_with_events, ada, "Unit42")
        data = assign(repo_with_events, house_id, ada, "b@x.com")

        rows = _outbox(repo_with_events)
        assert [r["hook_name"] for r in rows] == [
            "post_house_create",
            "post_member_assign",
            "send_house_invite_notice",
        ]
        assert all(r["status"] == "completed" for r in rows)
        notice = rows[-1]
        assert notice["id"] == data["notice_id"]
        assert json.loads(notice["payload"])["house_name"] == "Unit42"

    def test_failed_delivery_is_recorded(self, repo_with_broken_mailer: Repository) -> None:
        ada = register_user(repo_with_broken_mailer, "Ada", "a@x.com")
        register_user(repo_with_broken_mailer, "Bob", "b@x.com")
        house_id = create_house(repo_with_broken_mailer, ada)
        data = assign(repo_with_broken_mailer, house_id, ada, "b@x.com")

        notice = next(r for r in _outbox(repo_with_broken_mailer) if r["id"] == data["notice_id"])
        assert notice["status"] == "failed"
        assert "smtp unreachable" in notice["error"]


# ---------------------------------------------------------------------------
# Tests — failure safety
# ---------------------------------------------------------------------------


class TestEventDispatchFailureSafety:
    def test_broken_mailer_does_not_fail_assign(
        self, repo_with_broken_mailer: Repository
    ) -> None:
        ada = register_user(repo_with_broken_mailer, "Ada", "a@x.com")
        register_user(repo_with_broken_mailer, "Bob", "b@x.com")
        house_id = create_house(repo_with_broken_mailer, ada)

        result = MembershipService(repo_with_broken_mailer).assign_user(
            house_id, inviter_id=ada, user_email="b@x.com", role=3
        )
        assert result.ok
        assert result.warnings == ["Invite notice to b@x.com could not be delivered"]

    def test_async_dispatch_completes_after_wait(
        self, tmp_path: Path, recorder: NoticeRecorder
    ) -> None:
        repo = _repo_with_plugin(tmp_path, recorder, sync=False)
        try:
            ada = register_user(repo, "Ada", "a@x.com")
            register_user(repo, "Bob", "b@x.com")
            house_id = create_house(repo, ada)
            data = assign(repo, house_id, ada, "b@x.com")

            repo.event_bus.wait()
            assert repo.event_bus.status_of(data["notice_id"]) == "completed"
            assert len(recorder.named("send_house_invite_notice")) == 1
        finally:
            repo.close()

    def test_no_event_bus_is_noop(self, repo: Repository) -> None:
        assert repo.event_bus is None
        ada = register_user(repo, "Ada", "a@x.com")
        result = MembershipService(repo).create_house("Unit42", "desc", creator_id=ada)
        assert result.ok
        assert not result.warnings
