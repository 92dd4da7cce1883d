"""Tests for the dashboard's data helpers."""

from __future__ import annotations

from datetime import date

import pandas as pd

from bluehour.dashboard import frame_from_store, kpi_html, monthly_totals, week_window, weekday_totals

RAW = {"days": {
    "2026-03-02": {"focus_seconds": 1500, "completed_sessions": 1},
    "2026-03-14": {"focus_seconds": 3000, "completed_sessions": 2},
    "2026-02-28": {"focus_seconds": 600},
    "garbage": {"focus_seconds": 60},
    "2026-03-10": "bad",
}}


def test_frame_from_store():
    df = frame_from_store(RAW)
    assert [d.date().isoformat() for d in df["day"]] == ["2026-02-28", "2026-03-02", "2026-03-14"]
    assert df["minutes"].tolist() == [10, 25, 50]
    assert df["sessions"].tolist() == [0, 1, 2]


def test_frame_from_store_malformed():
    assert frame_from_store(None).empty
    assert frame_from_store({"days": []}).empty


def test_monthly_totals():
    s = monthly_totals(frame_from_store(RAW), 2026, 3)
    assert len(s) == 31
    assert s[date(2026, 3, 2)] == 25
    assert s[date(2026, 3, 14)] == 50
    assert s.sum() == 75


def test_monthly_totals_december():
    s = monthly_totals(frame_from_store(RAW), 2025, 12)
    assert len(s) == 31
    assert s.sum() == 0


def test_weekday_totals():
    wd = weekday_totals(frame_from_store(RAW))
    # 2026-03-02 is a Monday, 2026-03-14 a Saturday, 2026-02-28 a Saturday
    assert wd[0] == 25
    assert wd[5] == 60
    assert wd.sum() == 85


def test_week_window_zero_fills():
    week = week_window(frame_from_store(RAW), date(2026, 3, 14))
    assert len(week) == 7
    assert week.index[0] == pd.Timestamp("2026-03-08")
    assert week["minutes"].tolist() == [0, 0, 0, 0, 0, 0, 50]


def test_kpi_html():
    html = kpi_html([("Week minutes", 75)])
    assert "Week minutes" in html and "75" in html
