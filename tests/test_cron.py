import threading
from datetime import datetime, timedelta

import pytest

from zeroplugins.timer.cron import CronSchedule, CronScheduler


class FakeClock:
    def __init__(self, now):
        self.now = now

    def __call__(self):
        return self.now


def test_weekly_schedule_lands_on_the_right_weekday_and_time():
    when = datetime(2022, 6, 13, 10, 0)
    result = CronSchedule.parse("30 16 * * 6").next_after(when)
    assert result > when
    assert result - when < timedelta(days=7)
    assert result.isoweekday() % 7 == 6
    assert (result.hour, result.minute) == (16, 30)


def test_step_minutes():
    when = datetime(2022, 6, 13, 10, 7, 45)
    result = CronSchedule.parse("*/15 * * * *").next_after(when)
    assert result > when
    assert result - when <= timedelta(minutes=15)
    assert result.minute % 15 == 0
    assert result.second == 0


def test_next_after_is_strictly_later_on_exact_match():
    schedule = CronSchedule.parse("0 8 * * *")
    first = schedule.next_after(datetime(2022, 1, 1, 0, 0))
    second = schedule.next_after(first)
    assert second - first == timedelta(days=1)


def test_month_names():
    result = CronSchedule.parse("0 0 1 jan *").next_after(datetime(2022, 6, 1))
    assert (result.year, result.month, result.day) == (2023, 1, 1)


def test_day_fields_are_or_combined_when_neither_is_star():
    schedule = CronSchedule.parse("0 0 13 * 5")
    when = datetime(2022, 1, 1)
    seen_plain_friday = False
    for _ in range(20):
        when = schedule.next_after(when)
        assert when.day == 13 or when.isoweekday() % 7 == 5
        if when.day != 13:
            seen_plain_friday = True
    assert seen_plain_friday


def test_day_fields_are_and_combined_when_one_is_star():
    schedule = CronSchedule.parse("0 0 * * 1")
    when = datetime(2022, 1, 1)
    for _ in range(5):
        when = schedule.next_after(when)
        assert when.isoweekday() == 1


def test_descriptor_matches_its_expansion():
    assert CronSchedule.parse("@daily") == CronSchedule.parse("0 0 * * *")
    assert CronSchedule.parse("@hourly") == CronSchedule.parse("0 * * * *")


def test_every_adds_duration():
    when = datetime(2022, 6, 13, 10, 0, 0, 500000)
    result = CronSchedule.parse("@every 90s").next_after(when)
    assert result == when.replace(microsecond=0) + timedelta(seconds=90)


def test_every_rounds_up_to_one_second():
    when = datetime(2022, 6, 13, 10, 0)
    assert CronSchedule.parse("@every 500ms").next_after(when) == when + timedelta(seconds=1)


def test_impossible_date_gives_none():
    assert CronSchedule.parse("0 0 30 2 *").next_after(datetime(2022, 1, 1)) is None


@pytest.mark.parametrize(
    "expr",
    ["61 * * * *", "* * *", "a b c d e", "* * * * 7", "5-1 * * * *", "*/0 * * * *", "@never"],
)
def test_invalid_expressions(expr):
    with pytest.raises(ValueError):
        CronSchedule.parse(expr)


def test_add_and_remove_entries():
    scheduler = CronScheduler()
    first = scheduler.add("* * * * *", lambda: None)
    second = scheduler.add("0 0 * * *", lambda: None)
    assert first in scheduler and second in scheduler
    assert len(scheduler) == 2
    scheduler.remove(first)
    assert first not in scheduler
    assert len(scheduler) == 1


def test_add_rejects_bad_expression():
    scheduler = CronScheduler()
    with pytest.raises(ValueError):
        scheduler.add("nonsense", lambda: None)
    assert len(scheduler) == 0


def test_due_job_runs_and_removed_job_does_not():
    clock = FakeClock(datetime(2022, 6, 13, 10, 0, 30))
    scheduler = CronScheduler(clock)
    fired = threading.Event()
    removed = threading.Event()
    scheduler.add("* * * * *", fired.set)
    gone = scheduler.add("* * * * *", removed.set)
    scheduler.remove(gone)
    clock.now += timedelta(minutes=2)
    scheduler.start()
    try:
        assert fired.wait(5)
    finally:
        scheduler.stop()
    assert not removed.is_set()