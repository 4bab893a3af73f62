"""
Подписи для дат начала и срока задачи.

    format_start_at("2026-10-20T09:00:00Z", today=date(2026, 10, 19))
    # ScheduleLabel(label="Tomorrow", color="#FA1855", icon="calendar", ...)

Сравнение идёт по календарным дням: время суток не влияет на подпись.
"""

from dataclasses import dataclass
from datetime import date, datetime, tzinfo

TODAY_COLOR = "#FFD400"
ACCENT_COLOR = "#FA1855"
DUE_COLOR = "#fff"
OVERDUE_COLOR = "#EF4444"


@dataclass(frozen=True)
class ScheduleLabel:
    label: str
    color: str
    icon: str
    remaining: str | None = None
    is_overdue: bool = False


def _to_date(value: datetime | date | str, tz: tzinfo | None) -> date:
    if isinstance(value, str):
        value = datetime.fromisoformat(value.replace("Z", "+00:00"))
    if isinstance(value, datetime):
        if value.tzinfo is not None:
            value = value.astimezone(tz)
        return value.date()
    return value


def _days_until_end_of_week(today: date) -> int:
    # Неделя начинается в воскресенье: воскресенье -> 7, суббота -> 1
    sunday_based = (today.weekday() + 1) % 7
    return 7 - sunday_based


def _short_label(target: date) -> str:
    return f"{target:%a}, {target:%b} {target.day}"


def _label_for(target: date, today: date) -> tuple[str, int]:
    diff_days = (target - today).days
    if diff_days == 0:
        return "Today", diff_days
    if diff_days == 1:
        return "Tomorrow", diff_days
    if 2 <= diff_days < _days_until_end_of_week(today):
        return f"{target:%A}", diff_days
    return _short_label(target), diff_days


def format_start_at(
    value: datetime | date | str,
    today: date | None = None,
    tz: tzinfo | None = None,
) -> ScheduleLabel:
    """
    Подпись даты начала.

    Today (жёлтая звезда), Tomorrow, день недели до конца текущей недели,
    дальше - короткая дата "Mon, Oct 20".
    """
    today = today or date.today()
    label, diff_days = _label_for(_to_date(value, tz), today)

    if diff_days == 0:
        return ScheduleLabel(label=label, color=TODAY_COLOR, icon="star")
    return ScheduleLabel(label=label, color=ACCENT_COLOR, icon="calendar")


def _remaining(diff_days: int) -> str:
    if diff_days < 0:
        return f"{abs(diff_days)}d overdue"
    if diff_days == 0:
        return "due today"
    if diff_days == 1:
        return "1 day left"
    return f"{diff_days} days left"


def format_due_at(
    value: datetime | date | str,
    today: date | None = None,
    tz: tzinfo | None = None,
) -> ScheduleLabel:
    """
    Подпись срока: как у даты начала плюс остаток дней.

    Просроченный срок красный и помечен is_overdue.
    """
    today = today or date.today()
    label, diff_days = _label_for(_to_date(value, tz), today)
    is_overdue = diff_days < 0

    if diff_days == 0:
        color = TODAY_COLOR
    elif is_overdue:
        color = OVERDUE_COLOR
    else:
        color = DUE_COLOR

    return ScheduleLabel(
        label=label,
        color=color,
        icon="flag",
        remaining=_remaining(diff_days),
        is_overdue=is_overdue,
    )
