"""Tests for settings parsing and the duration resolver."""

from __future__ import annotations

import pytest

from bluehour.settings import Mode, Settings, load_settings, parse_minutes, save_settings, seconds_for
from bluehour.storage import MemoryStore

# ---- seconds_for ----


@pytest.mark.parametrize("p,s,l", [(25, 5, 15), (1, 1, 1), (120, 60, 90), (50, 10, 30)])
def test_seconds_for_is_minutes_times_60(p, s, l):
    settings = Settings(pomodoro_minutes=p, short_minutes=s, long_minutes=l)
    assert seconds_for(Mode.POMODORO, settings) == p * 60
    assert seconds_for(Mode.SHORT, settings) == s * 60
    assert seconds_for(Mode.LONG, settings) == l * 60


def test_seconds_for_accepts_mode_value():
    assert seconds_for("long", Settings()) == 900


# ---- parse_minutes ----


def test_parse_minutes_zero_clamps_to_lower_bound():
    assert parse_minutes(0, "pomodoro_minutes") == 1


def test_parse_minutes_non_numeric_uses_default():
    assert parse_minutes("abc", "pomodoro_minutes") == 25
    assert parse_minutes(None, "short_minutes") == 5
    assert parse_minutes("", "long_minutes") == 15


def test_parse_minutes_upper_bounds():
    assert parse_minutes(500, "pomodoro_minutes") == 120
    assert parse_minutes("61", "short_minutes") == 60
    assert parse_minutes(91, "long_minutes") == 90


def test_parse_minutes_truncates_floats():
    assert parse_minutes("12.9", "pomodoro_minutes") == 12
    assert parse_minutes(" 30 ", "pomodoro_minutes") == 30


def test_parse_minutes_negative_and_infinite():
    assert parse_minutes(-4, "short_minutes") == 1
    assert parse_minutes("inf", "pomodoro_minutes") == 25


# ---- Settings.from_dict ----


def test_from_dict_defaults():
    assert Settings.from_dict({}) == Settings()
    assert Settings.from_dict("garbage") == Settings()


def test_from_dict_unknown_alarm_falls_back_to_soft():
    assert Settings.from_dict({"alarm_kind": "siren"}).alarm_kind == "soft"
    assert Settings.from_dict({"alarm_kind": "digital"}).alarm_kind == "digital"


def test_from_dict_auto_next():
    assert Settings.from_dict({"auto_next": True}).auto_next is True
    assert Settings.from_dict({"auto_next": "false"}).auto_next is False
    assert Settings.from_dict({"auto_next": 0}).auto_next is False


# ---- direct construction ----


def test_constructor_clamps_out_of_range_minutes():
    s = Settings(pomodoro_minutes=0, short_minutes=500, long_minutes=-3)
    assert (s.pomodoro_minutes, s.short_minutes, s.long_minutes) == (1, 60, 1)
    assert seconds_for(Mode.POMODORO, s) == 60
    assert seconds_for(Mode.SHORT, s) == 3600


def test_constructor_normalizes_alarm_and_flag():
    s = Settings(pomodoro_minutes="abc", alarm_kind="siren", auto_next="yes")
    assert s.pomodoro_minutes == 25
    assert s.alarm_kind == "soft"
    assert s.auto_next is True


# ---- load / save ----


def test_load_missing_gives_defaults():
    assert load_settings(MemoryStore()) == Settings()


def test_load_corrupt_record_gives_defaults():
    assert load_settings(MemoryStore({"settings": [1, 2]})) == Settings()


def test_load_clamps_stored_values():
    store = MemoryStore({"settings": {"pomodoro_minutes": 0, "short_minutes": 999, "alarm_kind": 3}})
    s = load_settings(store)
    assert s.pomodoro_minutes == 1
    assert s.short_minutes == 60
    assert s.alarm_kind == "soft"


def test_save_then_load():
    store = MemoryStore()
    s = Settings(pomodoro_minutes=40, short_minutes=8, long_minutes=20, alarm_kind="bell", auto_next=True)
    save_settings(store, s)
    assert load_settings(store) == s
