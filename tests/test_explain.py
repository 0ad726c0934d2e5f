"""Tests for "why this?" explanations and display labels."""

import pytest
from datetime import date
from unittest.mock import MagicMock

from attentiontower.engine.explain import (
    explain_why_this,
    explain_with_fallback,
    format_age,
    format_expects_by,
)


class TestEventExplanations:

    def test_event_today(self, make_item, now):
        item = make_item(is_event=True, expects_by=date(2026, 1, 20))
        assert explain_why_this(item, 0, now) == "Happening today. This is your reminder."

    def test_event_tomorrow(self, make_item, now):
        item = make_item(is_event=True, expects_by=date(2026, 1, 21))
        assert explain_why_this(item, 0, now).startswith("Tomorrow.")

    def test_past_event(self, make_item, now):
        item = make_item(is_event=True, expects_by=date(2026, 1, 18))
        assert explain_why_this(item, 0, now) == "This was 2 days ago. Did you miss it, or should this be cleared?"

    def test_future_event(self, make_item, now):
        item = make_item(is_event=True, expects_by=date(2026, 1, 25))
        assert explain_why_this(item, 3, now).startswith("Coming up in 5 days.")


class TestDeadlineExplanations:

    def test_due_today(self, make_item, now):
        item = make_item(expects_by=date(2026, 1, 20))
        assert explain_why_this(item, 0, now).startswith("Expected today.")

    def test_due_tomorrow(self, make_item, now):
        item = make_item(expects_by=date(2026, 1, 21))
        assert explain_why_this(item, 0, now).startswith("Due tomorrow.")

    def test_due_in_days(self, make_item, now):
        item = make_item(expects_by=date(2026, 1, 26))
        assert explain_why_this(item, 0, now).startswith("Due in 6 days.")

    @pytest.mark.parametrize(
        "expects_by, prefix, tail",
        [
            (date(2026, 1, 19), "This was expected 1 day ago.", "The longer it waits"),
            (date(2026, 1, 17), "This was expected 3 days ago.", "Every extra day"),
            (date(2026, 1, 13), "This was expected 7 days ago.", "It needs a decision now"),
        ],
    )
    def test_overdue_language_escalates(self, make_item, now, expects_by, prefix, tail):
        text = explain_why_this(make_item(expects_by=expects_by), 0, now)
        assert text.startswith(prefix)
        assert tail in text


class TestAgeExplanations:

    def test_fresh_capture_as_hero(self, make_item, now):
        item = make_item(created_at=now)
        assert explain_why_this(item, 0, now).startswith("Fresh capture.")

    def test_fresh_capture_in_queue(self, make_item, now):
        item = make_item(created_at=now)
        assert explain_why_this(item, 1, now).startswith("Added today.")

    def test_yesterday(self, make_item, now, days_ago):
        assert explain_why_this(make_item(created_at=days_ago(1)), 0, now).startswith("From yesterday.")

    def test_few_days(self, make_item, now, days_ago):
        assert explain_why_this(make_item(created_at=days_ago(3)), 0, now).startswith("Waiting 3 days.")

    def test_week_old(self, make_item, now, days_ago):
        assert explain_why_this(make_item(created_at=days_ago(6)), 0, now).startswith("A week-old open loop.")

    def test_limbo(self, make_item, now, days_ago):
        assert explain_why_this(make_item(created_at=days_ago(20)), 0, now).startswith("20 days in limbo.")

    def test_deterministic(self, make_item, now, days_ago):
        item = make_item(created_at=days_ago(4))
        assert explain_why_this(item, 2, now) == explain_why_this(item, 2, now)


class TestExplainWithFallback:

    def test_no_client_uses_deterministic_text(self, make_item, now):
        item = make_item(expects_by=date(2026, 1, 20))
        assert explain_with_fallback(item, 0, now) == explain_why_this(item, 0, now)

    def test_client_phrasing_is_used(self, make_item, now):
        client = MagicMock()
        client.explain_item.return_value = "Today's the day for this one."
        item = make_item(text="Renew passport", expects_by=date(2026, 1, 20))

        assert explain_with_fallback(item, 0, now, client=client) == "Today's the day for this one."
        client.explain_item.assert_called_once_with("Renew passport", explain_why_this(item, 0, now))

    def test_client_failure_falls_back(self, make_item, now):
        client = MagicMock()
        client.explain_item.side_effect = RuntimeError("boom")
        item = make_item()
        assert explain_with_fallback(item, 0, now, client=client) == explain_why_this(item, 0, now)

    def test_empty_client_result_falls_back(self, make_item, now):
        client = MagicMock()
        client.explain_item.return_value = ""
        item = make_item()
        assert explain_with_fallback(item, 0, now, client=client) == explain_why_this(item, 0, now)

    def test_ai_excluded_item_never_reaches_client(self, make_item, now):
        client = MagicMock()
        item = make_item(text=".private thing")
        explain_with_fallback(item, 0, now, client=client)
        client.explain_item.assert_not_called()


class TestFormatAge:

    @pytest.mark.parametrize(
        "days, label",
        [(0, "today"), (3, "3d ago"), (6, "6d ago"), (7, "1w ago"), (14, "2w ago"), (29, "4w ago"), (65, "2mo ago")],
    )
    def test_labels(self, now, days_ago, days, label):
        assert format_age(days_ago(days), now) == label

    def test_future_reads_today(self, now, days_ago):
        assert format_age(days_ago(-2), now) == "today"


class TestFormatExpectsBy:

    def test_none(self, now):
        assert format_expects_by(None, now) == ""

    def test_today_and_tomorrow(self, now):
        assert format_expects_by(date(2026, 1, 20), now) == "today"
        assert format_expects_by(date(2026, 1, 21), now, is_event=True) == "tomorrow"

    def test_action_gets_weekday(self, now):
        assert format_expects_by(date(2026, 1, 24), now) == "sat"

    def test_event_gets_weekday_day_month(self, now):
        assert format_expects_by(date(2026, 1, 24), now, is_event=True) == "sat 24 jan"
