import json
import logging

from database import LocalStore, new_id


def test_get_missing_key_returns_default(store):
    assert store.get("students", []) == []
    assert store.get("students") is None


def test_set_then_get(store):
    store.set("students", [{"id": "s1", "name": "Ahmed Ali"}])
    assert store.get("students", []) == [{"id": "s1", "name": "Ahmed Ali"}]


def test_corrupt_file_falls_back_to_default(store, caplog):
    store.set("attendance", [])
    with open(store.path_for("attendance"), "w", encoding="utf-8") as f:
        f.write("[{not json")
    with caplog.at_level(logging.WARNING):
        assert store.get("attendance", ["fallback"]) == ["fallback"]
    assert "Could not read" in caplog.text


def test_write_failure_is_logged_not_raised(tmp_path, caplog):
    blocker = tmp_path / "blocked"
    blocker.write_text("a file, not a directory")
    store = LocalStore(str(blocker))
    with caplog.at_level(logging.ERROR):
        store.set("students", [{"id": "s1"}])
    assert "Could not save" in caplog.text


def test_unserializable_value_keeps_previous_file(store, caplog):
    store.set("announcements", [{"id": "anno1"}])
    with caplog.at_level(logging.ERROR):
        store.set("announcements", [object()])
    with open(store.path_for("announcements"), encoding="utf-8") as f:
        assert json.load(f) == [{"id": "anno1"}]
    assert "Could not save" in caplog.text


def test_new_id_is_unique_across_rapid_calls():
    ids = [new_id() for _ in range(500)]
    assert len(set(ids)) == 500
    assert all(len(i) == 24 for i in ids)
