"""Tests for item state transitions."""

import pytest
from datetime import date, timedelta

from attentiontower.engine import transitions
from attentiontower.engine.transitions import InvalidTransition
from attentiontower.engine.classifier import assign_bucket, BUCKET_DUE_TODAY, BUCKET_EVENT_TODAY, BUCKET_OPEN_CALL
from attentiontower.models.tower_item import TowerStatus


@pytest.fixture
def later(now):
    return now + timedelta(hours=2)


class TestStatusTransitions:

    def test_mark_done_sets_done_at(self, sample_item, later):
        done = transitions.mark_done(sample_item, later)
        assert done.status == TowerStatus.DONE
        assert done.done_at == later
        assert done.last_touched == later
        # Original is untouched
        assert sample_item.status == TowerStatus.ACTIVE

    def test_mark_done_twice_is_rejected(self, sample_item, later):
        done = transitions.mark_done(sample_item, later)
        with pytest.raises(InvalidTransition):
            transitions.mark_done(done, later)

    def test_hold_records_waiting_on(self, sample_item, later):
        held = transitions.hold(sample_item, later, "  Priya  ")
        assert held.status == TowerStatus.WAITING
        assert held.waiting_on == "Priya"
        assert held.last_touched == later

    def test_hold_without_reason_uses_default(self, sample_item, later):
        assert transitions.hold(sample_item, later).waiting_on == "unspecified"

    def test_defer_clears_waiting_on(self, make_item, later):
        held = make_item(status=TowerStatus.WAITING, waiting_on="Sam")
        deferred = transitions.defer(held, later)
        assert deferred.status == TowerStatus.SOMEDAY
        assert deferred.waiting_on is None

    @pytest.mark.parametrize("status", [TowerStatus.WAITING, TowerStatus.SOMEDAY])
    def test_reactivate(self, make_item, later, status):
        item = make_item(status=status, waiting_on="Sam" if status == TowerStatus.WAITING else None)
        active = transitions.reactivate(item, later)
        assert active.status == TowerStatus.ACTIVE
        assert active.waiting_on is None
        assert active.done_at is None

    def test_reactivate_active_item_is_rejected(self, sample_item, later):
        with pytest.raises(InvalidTransition):
            transitions.reactivate(sample_item, later)

    @pytest.mark.parametrize("apply", [transitions.hold, transitions.defer, transitions.reactivate])
    def test_done_item_cannot_move(self, make_item, now, later, apply):
        done = make_item(status=TowerStatus.DONE, done_at=now)
        with pytest.raises(InvalidTransition):
            apply(done, later)

    def test_invalid_transition_is_a_value_error(self):
        assert issubclass(InvalidTransition, ValueError)


class TestEdits:

    def test_edit_text_strips_and_touches(self, sample_item, later):
        edited = transitions.edit_text(sample_item, later, "  Email landlord ")
        assert edited.text == "Email landlord"
        assert edited.last_touched == later
        assert edited.status == sample_item.status

    def test_edit_text_rejects_blank(self, sample_item, later):
        with pytest.raises(ValueError):
            transitions.edit_text(sample_item, later, "   ")

    def test_flip_to_event_reclassifies(self, make_item, now):
        item = make_item(expects_by=date(2026, 1, 20))
        assert assign_bucket(item, now) == BUCKET_DUE_TODAY
        event = transitions.edit_schedule(item, now, is_event=True)
        assert assign_bucket(event, now) == BUCKET_EVENT_TODAY

    def test_set_date_from_string(self, sample_item, later):
        edited = transitions.edit_schedule(sample_item, later, expects_by="2026-02-01")
        assert edited.expects_by == date(2026, 2, 1)

    def test_clear_date(self, make_item, now):
        item = make_item(expects_by=date(2026, 1, 20))
        cleared = transitions.edit_schedule(item, now, expects_by=None)
        assert cleared.expects_by is None
        assert assign_bucket(cleared, now) == BUCKET_OPEN_CALL

    def test_malformed_date_becomes_no_date(self, make_item, now):
        item = make_item(expects_by=date(2026, 1, 20))
        edited = transitions.edit_schedule(item, now, expects_by="soonish")
        assert edited.expects_by is None

    def test_omitted_fields_are_kept(self, make_item, later):
        item = make_item(is_event=True, expects_by=date(2026, 1, 22))
        edited = transitions.edit_schedule(item, later, is_event=False)
        assert edited.expects_by == date(2026, 1, 22)
        assert edited.is_event is False
        assert edited.last_touched == later
