"""Tests for the optimistic local snapshot and its revert-on-failure contract."""

import pytest
from datetime import date, timedelta
from unittest.mock import MagicMock

from attentiontower.store.optimistic import OptimisticTower, TowerSnapshot, MutationFailed, UnknownItem
from attentiontower.models.tower_item import TowerStatus


class FakeRepository:
    """In-memory stand-in for TowerItemRepository that can be told to fail."""

    def __init__(self):
        self.items = {}
        self.fail = False

    def _check(self):
        if self.fail:
            raise ConnectionError("storage unavailable")

    def create(self, item):
        self._check()
        self.items[item.id] = item
        return item

    def update(self, item):
        self._check()
        if item.id not in self.items:
            raise ValueError(f"Tower item {item.id} not found")
        self.items[item.id] = item
        return item

    def delete(self, user_id, item_id):
        self._check()
        return self.items.pop(item_id, None) is not None


@pytest.fixture
def repo():
    return FakeRepository()


@pytest.fixture
def tower(repo, test_user_id, now):
    return OptimisticTower(TowerSnapshot(), repo, test_user_id, clock=lambda: now)


def _state(tower):
    return [item.model_dump() for item in tower.snapshot.items()]


class TestSuccessfulCommands:

    def test_add_persists_and_shows_in_view(self, tower, repo):
        item = tower.add("Book flights", expects_by=date(2026, 1, 20))
        assert item.id in repo.items
        assert tower.view().hero.id == item.id

    def test_complete_removes_from_view(self, tower):
        item = tower.add("Pay rent")
        done = tower.complete(item.id)
        assert done.status == TowerStatus.DONE
        assert tower.view().hero is None

    def test_hold_and_reactivate(self, tower):
        item = tower.add("Get quote")
        tower.hold(item.id, "builder")
        view = tower.view()
        assert [i.id for i in view.follow_up] == [item.id]
        assert view.follow_up[0].waiting_on == "builder"

        tower.reactivate(item.id)
        assert tower.view().hero.id == item.id

    def test_defer(self, tower):
        item = tower.add("Learn piano")
        tower.defer(item.id)
        assert [i.id for i in tower.view().someday] == [item.id]

    def test_edit_schedule_reclassifies(self, tower, now):
        item = tower.add("Dentist", expects_by=date(2026, 1, 20))
        assert tower.view().buckets[item.id] == 1
        tower.edit_schedule(item.id, is_event=True)
        assert tower.view().buckets[item.id] == 3

    def test_edit_text(self, tower):
        item = tower.add("typo")
        assert tower.edit_text(item.id, "fixed").text == "fixed"

    def test_delete(self, tower, repo):
        item = tower.add("Temp")
        tower.delete(item.id)
        assert item.id not in tower.snapshot
        assert item.id not in repo.items

    def test_capture_adds_each_parsed_item(self, tower):
        client = MagicMock()
        client.parse_brain_dump.return_value = [{"text": "one"}, {"text": "two", "status": "someday"}]
        created = tower.capture("one and two someday", client=client)
        assert [i.text for i in created] == ["one", "two"]
        assert len(tower.snapshot) == 2
        assert [i.text for i in tower.view().someday] == ["two"]

    def test_unknown_item(self, tower):
        with pytest.raises(UnknownItem):
            tower.complete("missing")


class TestRevertOnFailure:

    def test_failed_add_leaves_snapshot_unchanged(self, tower, repo):
        repo.fail = True
        with pytest.raises(MutationFailed):
            tower.add("never saved")
        assert len(tower.snapshot) == 0

    @pytest.mark.parametrize(
        "command",
        [
            lambda t, i: t.complete(i),
            lambda t, i: t.hold(i, "Sam"),
            lambda t, i: t.defer(i),
            lambda t, i: t.edit_text(i, "renamed"),
            lambda t, i: t.edit_schedule(i, expects_by=date(2026, 1, 19)),
            lambda t, i: t.delete(i),
        ],
    )
    def test_failed_mutation_restores_exact_state(self, tower, repo, command):
        first = tower.add("first")
        tower.add("second")
        before = _state(tower)
        view_before = [i.id for i in tower.view().ranked]

        repo.fail = True
        with pytest.raises(MutationFailed) as exc_info:
            command(tower, first.id)

        assert isinstance(exc_info.value.__cause__, ConnectionError)
        assert _state(tower) == before
        assert [i.id for i in tower.view().ranked] == view_before

    def test_failed_reactivate_stays_in_follow_up(self, tower, repo):
        item = tower.add("Waiting thing")
        tower.hold(item.id, "Lee")
        repo.fail = True
        with pytest.raises(MutationFailed):
            tower.reactivate(item.id)
        assert [i.id for i in tower.view().follow_up] == [item.id]

    def test_store_usable_after_revert(self, tower, repo, now):
        item = tower.add("retry me")
        repo.fail = True
        with pytest.raises(MutationFailed):
            tower.complete(item.id)
        repo.fail = False
        assert tower.complete(item.id).done_at == now

    def test_snapshot_seeded_from_existing_items(self, make_item, repo, test_user_id, now, days_ago):
        stale = make_item(text="stale", last_touched=days_ago(10))
        fresh = make_item(text="fresh", last_touched=days_ago(1))
        tower = OptimisticTower(TowerSnapshot([fresh, stale]), repo, test_user_id, clock=lambda: now)
        assert tower.view().hero.text == "stale"
        assert tower.view(now + timedelta(days=1)).hero.text == "stale"


def test_capture_without_client_saves_raw_text(tower, monkeypatch):
    from attentiontower.capture import parser

    shared = MagicMock()
    monkeypatch.setattr(parser, "_openai_client", shared)

    created = tower.capture("  renew passport ", client=None)

    shared.parse_brain_dump.assert_not_called()
    assert [i.text for i in created] == ["renew passport"]
