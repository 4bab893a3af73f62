"""Тесты подписей дат начала и срока."""

from datetime import date, datetime

from sloth.client import format_due_at, format_start_at
from sloth.client.schedule import ACCENT_COLOR, DUE_COLOR, OVERDUE_COLOR, TODAY_COLOR

# Понедельник
MONDAY = date(2026, 10, 19)


def test_start_today():
    label = format_start_at(date(2026, 10, 19), today=MONDAY)

    assert label.label == "Today"
    assert label.color == TODAY_COLOR
    assert label.icon == "star"


def test_start_tomorrow():
    label = format_start_at(datetime(2026, 10, 20, 23, 30), today=MONDAY)

    assert label.label == "Tomorrow"
    assert label.color == ACCENT_COLOR


def test_start_rest_of_week_uses_weekday_name():
    """Test: до конца недели (до субботы включительно) - название дня."""
    assert format_start_at(date(2026, 10, 21), today=MONDAY).label == "Wednesday"
    assert format_start_at(date(2026, 10, 24), today=MONDAY).label == "Saturday"


def test_start_next_week_uses_short_date():
    assert format_start_at(date(2026, 10, 25), today=MONDAY).label == "Sun, Oct 25"
    assert format_start_at(date(2026, 11, 2), today=MONDAY).label == "Mon, Nov 2"


def test_start_from_iso_string():
    label = format_start_at("2026-10-19T08:00:00", today=MONDAY)

    assert label.label == "Today"


def test_saturday_has_no_rest_of_week():
    """Test: в субботу послезавтра уже следующая неделя."""
    saturday = date(2026, 10, 24)

    assert format_start_at(date(2026, 10, 26), today=saturday).label == "Mon, Oct 26"


def test_due_today():
    label = format_due_at(date(2026, 10, 19), today=MONDAY)

    assert label.label == "Today"
    assert label.remaining == "due today"
    assert label.color == TODAY_COLOR
    assert label.icon == "flag"
    assert label.is_overdue is False


def test_due_tomorrow():
    label = format_due_at(date(2026, 10, 20), today=MONDAY)

    assert label.label == "Tomorrow"
    assert label.remaining == "1 day left"
    assert label.color == DUE_COLOR


def test_due_in_days():
    label = format_due_at(date(2026, 10, 22), today=MONDAY)

    assert label.label == "Thursday"
    assert label.remaining == "3 days left"


def test_due_overdue():
    label = format_due_at(date(2026, 10, 17), today=MONDAY)

    assert label.label == "Sat, Oct 17"
    assert label.remaining == "2d overdue"
    assert label.is_overdue is True
    assert label.color == OVERDUE_COLOR
