"""Tests for HouseRegistry — create, read, patch."""

import pytest

from housectl.domain.errors import NotFound, ValidationFailed
from housectl.infrastructure.repository import Repository


@pytest.fixture
def owner_id(repo: Repository) -> int:
    with repo.transaction() as txn:
        return txn.identity.register("Ada", "a@x.com").id


class TestCreate:
    def test_create(self, repo: Repository, owner_id: int) -> None:
        with repo.transaction() as txn:
            house = txn.houses.create("  Unit42 ", "desc", None, owner_id)
        assert house.name == "Unit42"
        assert house.created_by == owner_id
        assert house.updated_by == owner_id
        assert house.image is None

    def test_create_validates(self, repo: Repository, owner_id: int) -> None:
        with pytest.raises(ValidationFailed, match="name is required"):
            with repo.transaction() as txn:
                txn.houses.create("", "desc", None, owner_id)
        with repo.reader() as txn:
            assert txn.houses.list_all() == []

    def test_name_too_short(self, repo: Repository, owner_id: int) -> None:
        with pytest.raises(ValidationFailed):
            with repo.transaction() as txn:
                txn.houses.create("abc", "desc", None, owner_id)


class TestRead:
    def test_get_missing(self, repo: Repository) -> None:
        with repo.reader() as txn:
            assert txn.houses.exists(1) is False
            with pytest.raises(NotFound):
                txn.houses.get(1)

    def test_list(self, repo: Repository, owner_id: int) -> None:
        with repo.transaction() as txn:
            first = txn.houses.create("First House", "one", None, owner_id)
            second = txn.houses.create("Second House", "two", None, owner_id)
        with repo.reader() as txn:
            assert [h.id for h in txn.houses.list_all()] == [first.id, second.id]
            assert set(txn.houses.list_by_ids([second.id])) == {second.id}
            assert txn.houses.list_by_ids([]) == {}


class TestUpdate:
    def test_partial_update_stamps_actor(self, repo: Repository, owner_id: int) -> None:
        with repo.transaction() as txn:
            house = txn.houses.create("Unit42", "desc", None, owner_id)
            editor = txn.identity.register("Bob", "b@x.com")
            updated = txn.houses.update(house.id, {"description": "new"}, editor.id)
        assert updated.description == "new"
        assert updated.name == "Unit42"
        assert updated.updated_by == editor.id
        assert updated.created_by == owner_id

    def test_unknown_field(self, repo: Repository, owner_id: int) -> None:
        with repo.transaction() as txn:
            house = txn.houses.create("Unit42", "desc", None, owner_id)
        with pytest.raises(ValidationFailed, match="cannot update field: created_by"):
            with repo.transaction() as txn:
                txn.houses.update(house.id, {"created_by": 5}, owner_id)

    def test_empty_patch(self, repo: Repository, owner_id: int) -> None:
        with repo.transaction() as txn:
            house = txn.houses.create("Unit42", "desc", None, owner_id)
        with pytest.raises(ValidationFailed, match="no changes"):
            with repo.transaction() as txn:
                txn.houses.update(house.id, {}, owner_id)

    def test_constraint_violation(self, repo: Repository, owner_id: int) -> None:
        with repo.transaction() as txn:
            house = txn.houses.create("Unit42", "desc", None, owner_id)
        with pytest.raises(ValidationFailed):
            with repo.transaction() as txn:
                txn.houses.update(house.id, {"description": "d" * 281}, owner_id)

    def test_missing_house(self, repo: Repository, owner_id: int) -> None:
        with pytest.raises(NotFound):
            with repo.transaction() as txn:
                txn.houses.update(99, {"name": "Renamed"}, owner_id)
