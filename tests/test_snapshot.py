"""Tests for the JSON snapshot store."""

import json

import pytest

from job_watch.storage.snapshot import SnapshotError, SnapshotStore


@pytest.fixture
def store(tmp_path):
    return SnapshotStore(str(tmp_path / "nested" / "seen-jobs.json"))


class TestSnapshotStore:
    def test_missing_file_loads_empty(self, store):
        assert not store.exists()
        assert store.load() == {}

    def test_save_then_load(self, store):
        data = {"1": {"seenAt": "a", "postedAt": "b", "title": "Café", "url": "u"}}
        store.save(data)
        assert store.exists()
        assert store.load() == data

    def test_saved_file_is_pretty_utf8(self, store):
        store.save({"1": {"title": "Café"}})
        text = store.path.read_text(encoding="utf-8")
        assert "Café" in text
        assert '\n  "1": {' in text

    def test_save_overwrites_everything(self, store):
        store.save({"1": {}, "2": {}})
        store.save({"3": {}})
        assert store.load() == {"3": {}}

    def test_no_temp_files_left_behind(self, store):
        store.save({"1": {}})
        assert [p.name for p in store.path.parent.iterdir()] == ["seen-jobs.json"]

    def test_invalid_json_raises(self, store):
        store.path.parent.mkdir(parents=True)
        store.path.write_text("{oops", encoding="utf-8")
        with pytest.raises(SnapshotError):
            store.load()

    def test_non_object_raises(self, store):
        store.path.parent.mkdir(parents=True)
        store.path.write_text(json.dumps([1, 2]), encoding="utf-8")
        with pytest.raises(SnapshotError):
            store.load()

    def test_unserializable_data_raises(self, store):
        with pytest.raises(SnapshotError):
            store.save({"1": object()})
