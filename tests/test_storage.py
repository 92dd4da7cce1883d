"""Tests for the JSON key-value store."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from bluehour.storage import JsonStore, MemoryStore, app_data_dir


@pytest.fixture()
def store(tmp_path: Path) -> JsonStore:
    return JsonStore(tmp_path)


# ---- set ----


def test_set_writes_valid_json(store, tmp_path):
    store.set("settings", {"a": 1, "b": [1, 2, 3]})
    assert json.loads((tmp_path / "settings.json").read_text()) == {"a": 1, "b": [1, 2, 3]}


def test_set_creates_parent_dirs(tmp_path):
    deep = JsonStore(tmp_path / "a" / "b")
    deep.set("k", {"x": 1})
    assert (tmp_path / "a" / "b" / "k.json").exists()


def test_set_leaves_no_tmp(store, tmp_path):
    store.set("k", {"x": 1})
    assert not (tmp_path / "k.json.tmp").exists()


# ---- get ----


def test_get_missing_returns_default(store):
    assert store.get("nope") is None
    assert store.get("nope", {"d": 1}) == {"d": 1}


def test_get_empty_file_returns_default(store, tmp_path):
    (tmp_path / "k.json").write_text("", encoding="utf-8")
    assert store.get("k", "dflt") == "dflt"


def test_get_roundtrip(store):
    store.set("analytics", {"days": {"2026-01-01": {"focus_seconds": 60}}})
    assert store.get("analytics") == {"days": {"2026-01-01": {"focus_seconds": 60}}}


def test_get_corrupt_returns_default_and_moves_aside(store, tmp_path):
    (tmp_path / "settings.json").write_text("not valid json {{{{", encoding="utf-8")
    assert store.get("settings", {}) == {}
    assert not (tmp_path / "settings.json").exists()
    assert len(list(tmp_path.glob("settings.corrupt-*.json"))) == 1


# ---- delete ----


def test_delete_removes_and_is_idempotent(store, tmp_path):
    store.set("k", 1)
    store.delete("k")
    store.delete("k")
    assert not (tmp_path / "k.json").exists()


# ---- misc ----


def test_app_data_dir_env_override(tmp_path, monkeypatch):
    monkeypatch.setenv("BLUEHOUR_DATA", str(tmp_path / "custom"))
    assert app_data_dir() == tmp_path / "custom"
    assert (tmp_path / "custom").is_dir()


def test_default_store_uses_app_data_dir(tmp_path, monkeypatch):
    monkeypatch.setenv("BLUEHOUR_DATA", str(tmp_path))
    assert JsonStore().base_dir == tmp_path


def test_memory_store_copies_values():
    m = MemoryStore()
    value = {"a": [1]}
    m.set("k", value)
    value["a"].append(2)
    got = m.get("k")
    got["a"].append(3)
    assert m.get("k") == {"a": [1]}
