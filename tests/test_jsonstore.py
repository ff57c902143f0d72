"""Test jsonstore -- clawseo."""
from __future__ import annotations

import json

import pytest

from clawseo.jsonstore import load_json, run_sync, save_json


# ===========================================================================
# LOAD / SAVE
# ===========================================================================


class TestJsonFiles:
    """Atomic writes and tolerant reads."""

    def test_save_creates_parents(self, tmp_path):
        path = tmp_path / "nested" / "store.json"
        save_json(path, {"items": [1, 2]})
        assert json.loads(path.read_text()) == {"items": [1, 2]}
        assert not path.with_suffix(".json.tmp").exists()

    def test_failed_dump_leaves_no_tmp(self, tmp_path):
        path = tmp_path / "store.json"
        save_json(path, {"ok": True})
        circular = {}
        circular["self"] = circular

        with pytest.raises(ValueError):
            save_json(path, circular)

        assert list(tmp_path.iterdir()) == [path]
        assert json.loads(path.read_text()) == {"ok": True}

    def test_load_missing_and_corrupt(self, tmp_path):
        assert load_json(tmp_path / "missing.json") == {}
        assert load_json(tmp_path / "missing.json", default=[]) == []
        bad = tmp_path / "bad.json"
        bad.write_text("{not json")
        assert load_json(bad, default=[]) == []


class TestRunSync:
    """Coroutines run to completion from sync code."""

    def test_run_sync(self):
        async def answer():
            return 42

        assert run_sync(answer()) == 42
