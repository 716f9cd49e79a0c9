from datetime import date, timedelta

import pytest

from gantt_editor.timeline import (
    BAR_GUTTER,
    clamp_zoom,
    days_between,
    effective_day_width,
    pixels_to_days,
    task_duration,
    task_position,
    timeline_window,
)

from factories import make_task

ORIGIN = date(2025, 7, 13)


@pytest.mark.parametrize("span", [0, 1, 7, 40])
def test_duration_is_inclusive(span: int) -> None:
    end = ORIGIN + timedelta(days=span)

    assert task_duration(ORIGIN, end) == days_between(ORIGIN, end) + 1


def test_duration_never_below_one() -> None:
    assert task_duration(ORIGIN, ORIGIN) == 1
    assert task_duration(ORIGIN, ORIGIN - timedelta(days=3)) == 1


def test_position_for_multi_day_task() -> None:
    task = make_task("T", start=date(2025, 7, 15), end=date(2025, 7, 17))

    position = task_position(task, ORIGIN, 48)

    assert position.left == 2 * 48
    assert position.width == 3 * 48 - BAR_GUTTER


def test_position_clamps_tasks_before_origin() -> None:
    task = make_task("T", start=date(2025, 7, 1), end=date(2025, 7, 20))

    assert task_position(task, ORIGIN, 10).left == 0


@pytest.mark.parametrize("day_width", [1, 3, 8, 24, 48 * 3.0])
def test_milestone_width_floor(day_width: float) -> None:
    milestone = make_task("M", start=date(2025, 8, 9))

    assert task_position(milestone, ORIGIN, day_width).width >= 0.5 * day_width


def test_effective_day_width_uses_zoom() -> None:
    assert effective_day_width(48, 1.5) == 72


@pytest.mark.parametrize(
    "pixels, expected",
    [(0, 0), (23, 0), (24, 1), (-24, 0), (-25, -1), (-23, 0), (144, 3), (-250, -5)],
)
def test_pixels_to_days_rounds(pixels: float, expected: int) -> None:
    assert pixels_to_days(pixels, 48) == expected


def test_pixels_to_days_with_zero_width() -> None:
    assert pixels_to_days(100, 0) == 0


def test_clamp_zoom() -> None:
    assert clamp_zoom(5) == 3.0
    assert clamp_zoom(0.1) == 0.5
    assert clamp_zoom(1.2) == 1.2


def test_day_window_is_fixed() -> None:
    window = timeline_window("day", today=date(2030, 1, 1))

    assert window.start == ORIGIN
    assert window.end == date(2025, 8, 31)
    assert window.base_day_width == 48
    assert len(window.dates()) == window.day_count() == 50


def test_week_window_starts_on_sunday() -> None:
    window = timeline_window("week", today=date(2026, 10, 15))  # a Thursday

    assert window.start == date(2026, 10, 11)
    assert window.start.weekday() == 6
    assert window.end == window.start + timedelta(days=84)
    assert window.base_day_width == 24


def test_month_window_runs_to_month_end() -> None:
    window = timeline_window("month", today=date(2026, 10, 15))

    assert window.start == date(2026, 10, 1)
    assert window.end == date(2027, 10, 31)
    assert window.base_day_width == 8
