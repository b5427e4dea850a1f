"""Tests for Repository — coordinated DB + file transactions."""

from pathlib import Path

import pytest
from sqlalchemy import text

from housectl.config.settings import HouseSettings
from housectl.domain.errors import ValidationFailed
from housectl.infrastructure.repository import Repository
from tests.conftest import PNG_BYTES


class TestRepositoryInit:
    def test_root_and_settings(self, repo: Repository, tmp_path: Path) -> None:
        assert repo.root == tmp_path
        assert repo.settings.membership.remove_min_role == 9
        assert repo.event_bus is None

    def test_existing_db_reused(self, tmp_path: Path) -> None:
        settings = HouseSettings.from_cli(data_root=tmp_path)
        first = Repository(settings)
        with first.transaction() as txn:
            txn.identity.register("Ada", "a@x.com")
        first.close()

        second = Repository(settings)
        with second.reader() as txn:
            assert txn.identity.resolve_by_email("a@x.com") == 1
        second.close()

    def test_storage_settings_applied(self, tmp_path: Path) -> None:
        (tmp_path / "housectl.toml").write_text("[storage]\nmax_image_kb = 1\n")
        r = Repository(HouseSettings.from_cli(data_root=tmp_path))
        assert r.images.directory == tmp_path / ".housectl" / "avatars"
        with pytest.raises(ValidationFailed):
            with r.transaction() as txn:
                txn.store_image(PNG_BYTES + b"\x00" * 2048)
        r.close()


class TestTransaction:
    def test_commit(self, repo: Repository) -> None:
        with repo.transaction() as txn:
            txn.identity.register("Ada", "a@x.com")
        with repo.engine.connect() as conn:
            assert conn.execute(text("SELECT count(*) FROM users")).scalar() == 1

    def test_rollback_on_error(self, repo: Repository) -> None:
        with pytest.raises(RuntimeError):
            with repo.transaction() as txn:
                txn.identity.register("Ada", "a@x.com")
                raise RuntimeError("boom")
        with repo.engine.connect() as conn:
            assert conn.execute(text("SELECT count(*) FROM users")).scalar() == 0

    def test_stores_are_bound_once(self, repo: Repository) -> None:
        with repo.transaction() as txn:
            assert txn.houses is txn.houses
            assert txn.memberships.__class__.__name__ == "MembershipStore"


class TestFileCompensation:
    def test_new_file_removed_on_rollback(self, repo: Repository) -> None:
        target = repo.root / ".housectl" / "avatars" / "new.bin"
        with pytest.raises(RuntimeError):
            with repo.transaction() as txn:
                txn.write_bytes(target, b"data")
                assert target.exists()
                raise RuntimeError("boom")
        assert not target.exists()

    def test_overwrite_restored_on_rollback(self, repo: Repository) -> None:
        target = repo.root / "existing.bin"
        target.write_bytes(b"original")
        with pytest.raises(RuntimeError):
            with repo.transaction() as txn:
                txn.write_bytes(target, b"changed")
                raise RuntimeError("boom")
        assert target.read_bytes() == b"original"

    def test_stored_image_kept_on_commit(self, repo: Repository) -> None:
        with repo.transaction() as txn:
            ref = txn.store_image(PNG_BYTES)
        assert (repo.root / ref).read_bytes() == PNG_BYTES

    def test_stored_image_removed_on_rollback(self, repo: Repository) -> None:
        with pytest.raises(RuntimeError):
            with repo.transaction() as txn:
                ref = txn.store_image(PNG_BYTES)
                raise RuntimeError("boom")
        assert not (repo.root / ref).exists()
