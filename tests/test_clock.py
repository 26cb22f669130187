import pytest

from zeroplugins.timer.clock import Clock, alert_message
from zeroplugins.timer.parse import filled_cron_timer, filled_timer


class Recorder:
    def __init__(self):
        self.calls = []

    def __call__(self, self_id, group_id, message):
        self.calls.append((self_id, group_id, message))


@pytest.fixture
def db_path(tmp_path):
    return tmp_path / "test.db"


def test_timer_added_to_db_only_is_listed_after_reload(db_path):
    clock = Clock(db_path, Recorder())
    clock.add_timer_into_db(
        filled_timer(["", "12", "-1", "12", "0", "", "test"], 0, 0, False)
    )
    assert clock.list_timers(0) == []
    clock.close()
    with Clock(db_path, Recorder()) as reloaded:
        assert reloaded.list_timers(0) == ["12月1周12:0\n"]


def test_alert_message_without_image():
    timer = filled_cron_timer("0 8 * * *", "早上好", "", 0, 1)
    assert alert_message(timer) == [
        {"type": "at", "data": {"qq": "all"}},
        {"type": "text", "data": {"text": "早上好"}},
    ]


def test_alert_message_with_image():
    timer = filled_cron_timer("0 8 * * *", "hi", "http://example.com/a.png", 0, 1)
    assert alert_message(timer)[-1] == {
        "type": "image",
        "data": {"file": "http://example.com/a.png", "cache": "0"},
    }


def test_register_cron_timer(db_path):
    with Clock(db_path, Recorder()) as clock:
        timer = filled_cron_timer("0 8 * * *", "morning", "", 0, 5)
        assert clock.register_timer(timer, True, False)
        assert timer.id == timer.timer_id()
        assert clock.get_timer(timer.id) is timer
        assert clock.list_timers(5) == ["0 8 * * *\n"]
        assert clock.list_timers(6) == []


def test_bad_cron_expression_is_reported(db_path):
    with Clock(db_path, Recorder()) as clock:
        timer = filled_cron_timer("not a cron", "x", "", 0, 5)
        assert clock.register_timer(timer, True, False) is False
        assert timer.alert.startswith("expected exactly 5 fields")
        assert clock.get_timer(timer.id) is None


def test_cron_timer_survives_reload(db_path):
    clock = Clock(db_path, Recorder())
    timer = filled_cron_timer("0 8 * * *", "morning", "", 0, 5)
    clock.register_timer(timer, True, False)
    key = timer.id
    clock.close()
    with Clock(db_path, Recorder()) as reloaded:
        loaded = reloaded.get_timer(key)
        assert loaded.alert == "morning"
        assert loaded.cron == "0 8 * * *"


def test_every_fields_are_shown_as_mei(db_path):
    with Clock(db_path, Recorder()) as clock:
        timer = filled_timer(["", "每", "每周", "8", "30", "", "hi"], 0, 7, False)
        assert clock.register_timer(timer, True, False)
        assert clock.list_timers(7) == ["每月每周8:30\n"]


def test_reregistering_disables_previous_timer(db_path):
    with Clock(db_path, Recorder()) as clock:
        first = filled_timer(["", "12", "-1", "12", "0", "", "a"], 0, 3, False)
        second = filled_timer(["", "12", "-1", "12", "0", "", "b"], 0, 3, False)
        clock.register_timer(first, True, False)
        clock.register_timer(second, True, False)
        assert first.enabled is False
        assert second.enabled is True
        assert clock.get_timer(second.id) is second


def test_cancel_timer(db_path):
    clock = Clock(db_path, Recorder())
    timer = filled_timer(["", "12", "-1", "12", "0", "", "a"], 0, 3, False)
    clock.register_timer(timer, True, False)
    key = timer.id
    assert clock.cancel_timer(key) is True
    assert clock.get_timer(key) is None
    assert timer.enabled is False
    assert clock.cancel_timer(key) is False
    clock.close()
    with Clock(db_path, Recorder()) as reloaded:
        assert reloaded.get_timer(key) is None


def test_cancel_cron_timer(db_path):
    with Clock(db_path, Recorder()) as clock:
        timer = filled_cron_timer("0 8 * * *", "morning", "", 0, 5)
        clock.register_timer(timer, True, False)
        assert clock.cancel_timer(timer.id) is True
        assert clock.list_timers(5) == []