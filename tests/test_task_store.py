import json
import logging
import os
import stat
from pathlib import Path

import pytest

from tasklist.errors import PersistenceError, TaskNotFoundError, UserDeclined, ValidationError
from tasklist.state.tasks import Task, TaskStore


def yes(question: str) -> bool:
    return True


def no(question: str) -> bool:
    return False


def dump(store: TaskStore) -> list:
    return [task.to_dict() for task in store.list_all()]


def read_file(path: Path) -> list:
    return json.loads(path.read_text(encoding="utf-8"))


def test_missing_file_is_empty_store(tmp_path: Path) -> None:
    store = TaskStore(tmp_path / "tasks.json")
    assert store.list_all() == []
    assert len(store) == 0
    # Loading alone never creates the file
    assert not (tmp_path / "tasks.json").exists()


def test_add_assigns_sequential_ids_and_persists(tmp_path: Path) -> None:
    path = tmp_path / "tasks.json"
    store = TaskStore(path)
    for title in ["one", "two", "three", "four"]:
        store.add(title)

    assert [task.id for task in store.list_all()] == [1, 2, 3, 4]
    assert [task.title for task in store.list_all()] == ["one", "two", "three", "four"]
    assert read_file(path) == dump(store)


def test_add_strips_and_rejects_blank_titles(tmp_path: Path) -> None:
    store = TaskStore(tmp_path / "tasks.json")
    assert store.add("  Buy milk ").title == "Buy milk"

    with pytest.raises(ValidationError):
        store.add("   ")
    assert len(store) == 1


def test_scenario_add_done_add_delete(tmp_path: Path) -> None:
    path = tmp_path / "tasks.json"
    store = TaskStore(path)

    store.add("Buy milk")
    assert dump(store) == [{"id": 1, "title": "Buy milk", "done": False}]

    store.mark_done(1)
    assert dump(store) == [{"id": 1, "title": "Buy milk", "done": True}]

    store.add("Walk dog")
    assert dump(store) == [
        {"id": 1, "title": "Buy milk", "done": True},
        {"id": 2, "title": "Walk dog", "done": False},
    ]

    removed = store.delete(1, yes)
    assert removed.title == "Buy milk"
    assert dump(store) == [{"id": 1, "title": "Walk dog", "done": False}]
    assert read_file(path) == dump(store)


def test_delete_renumbers_preserving_order(tmp_path: Path) -> None:
    store = TaskStore(tmp_path / "tasks.json")
    for title in "abcde":
        store.add(title)

    removed = store.delete(3, yes)

    assert removed.id == 3
    assert [task.id for task in store.list_all()] == [1, 2, 3, 4]
    assert [task.title for task in store.list_all()] == ["a", "b", "d", "e"]


def test_delete_declined_leaves_store_and_file(tmp_path: Path) -> None:
    path = tmp_path / "tasks.json"
    store = TaskStore(path)
    store.add("keep me")
    before = path.read_text(encoding="utf-8")

    asked = []

    def decline(question: str) -> bool:
        asked.append(question)
        return False

    with pytest.raises(UserDeclined):
        store.delete(1, decline)

    assert asked == ["Are you sure you want to delete Task 1: keep me?"]
    assert len(store) == 1
    assert path.read_text(encoding="utf-8") == before


def test_delete_unknown_id_does_not_ask(tmp_path: Path) -> None:
    store = TaskStore(tmp_path / "tasks.json")
    store.add("a")

    def fail(question: str) -> bool:
        raise AssertionError("confirmation should not be requested")

    with pytest.raises(TaskNotFoundError) as excinfo:
        store.delete(7, fail)
    assert excinfo.value.task_id == 7
    assert str(excinfo.value) == "Task ID not found: 7"


def test_set_done_round_trip_and_idempotence(tmp_path: Path) -> None:
    path = tmp_path / "tasks.json"
    store = TaskStore(path)
    store.add("a")

    task, changed = store.mark_done(1)
    assert changed and task.done

    mtime = path.stat().st_mtime_ns
    contents = path.read_text(encoding="utf-8")
    task, changed = store.mark_done(1)
    assert not changed and task.done
    assert path.stat().st_mtime_ns == mtime
    assert path.read_text(encoding="utf-8") == contents

    task, changed = store.mark_undone(1)
    assert changed and not task.done

    task, changed = store.set_done(1, False)
    assert not changed and not task.done
    assert read_file(path) == [{"id": 1, "title": "a", "done": False}]


def test_set_done_unknown_id_leaves_store_unchanged(tmp_path: Path) -> None:
    store = TaskStore(tmp_path / "tasks.json")
    store.add("a")
    store.add("b")
    before = dump(store)

    with pytest.raises(TaskNotFoundError):
        store.mark_done(5)
    assert dump(store) == before


def test_reset_confirmed_empties_store_and_file(tmp_path: Path) -> None:
    path = tmp_path / "tasks.json"
    store = TaskStore(path)
    store.add("a")
    store.add("b")

    assert store.reset(yes) == 2
    assert store.list_all() == []
    assert read_file(path) == []


def test_reset_declined_keeps_everything(tmp_path: Path) -> None:
    path = tmp_path / "tasks.json"
    store = TaskStore(path)
    store.add("a")
    before = path.read_text(encoding="utf-8")

    with pytest.raises(UserDeclined):
        store.reset(no)
    assert len(store) == 1
    assert path.read_text(encoding="utf-8") == before


def test_save_then_load_round_trip(tmp_path: Path) -> None:
    path = tmp_path / "tasks.json"
    store = TaskStore(path)
    store.add("Buy milk")
    store.add("Walk dog")
    store.add("Write report")
    store.mark_done(2)

    reloaded = TaskStore(path)
    assert dump(reloaded) == dump(store)


def test_file_format_is_indented_array(tmp_path: Path) -> None:
    path = tmp_path / "tasks.json"
    store = TaskStore(path)
    store.add("a")

    text = path.read_text(encoding="utf-8")
    assert text.startswith("[\n {\n")
    assert '"id": 1' in text
    assert '"done": false' in text


def test_malformed_file_logs_and_starts_empty(tmp_path: Path, caplog) -> None:
    path = tmp_path / "tasks.json"
    path.write_text("{not json", encoding="utf-8")

    with caplog.at_level(logging.ERROR, logger="tasklist"):
        store = TaskStore(path)

    assert store.list_all() == []
    assert "Error parsing" in caplog.text
    # The broken file is left alone until the next save
    assert path.read_text(encoding="utf-8") == "{not json"


@pytest.mark.parametrize(
    "content",
    [
        '{"id": 1, "title": "x", "done": false}',
        '[{"id": "1", "title": "x", "done": false}]',
        '[{"id": 1, "title": 5, "done": false}]',
        '[{"id": 1, "title": "x", "done": "no"}]',
        '[{"id": true, "title": "x", "done": false}]',
        '["just a string"]',
    ],
)
def test_structurally_invalid_files_are_parse_errors(tmp_path: Path, caplog, content: str) -> None:
    path = tmp_path / "tasks.json"
    path.write_text(content, encoding="utf-8")

    with caplog.at_level(logging.ERROR, logger="tasklist"):
        store = TaskStore(path)

    assert store.list_all() == []
    assert "Error parsing" in caplog.text


def test_sparse_ids_are_renumbered_on_load(tmp_path: Path, caplog) -> None:
    path = tmp_path / "tasks.json"
    path.write_text(
        json.dumps(
            [
                {"id": 4, "title": "a", "done": False},
                {"id": 9, "title": "b", "done": True},
            ]
        ),
        encoding="utf-8",
    )

    with caplog.at_level(logging.WARNING, logger="tasklist"):
        store = TaskStore(path)

    assert dump(store) == [
        {"id": 1, "title": "a", "done": False},
        {"id": 2, "title": "b", "done": True},
    ]
    assert "renumbering" in caplog.text
    assert store.add("c").id == 3


def test_save_failure_raises_persistence_error(tmp_path: Path, monkeypatch) -> None:
    store = TaskStore(tmp_path / "tasks.json")

    def boom(src, dst):
        raise OSError("disk full")

    monkeypatch.setattr("tasklist.state.persistence.shutil.move", boom)

    with pytest.raises(PersistenceError, match="disk full"):
        store.add("a")

    # In-memory change is kept, no temp files are left behind
    assert [task.title for task in store.list_all()] == ["a"]
    assert list(tmp_path.iterdir()) == []


def test_task_from_dict_defaults_done_to_false() -> None:
    task = Task.from_dict({"id": 3, "title": "x"})
    assert task.to_dict() == {"id": 3, "title": "x", "done": False}


@pytest.mark.skipif(os.name == "nt", reason="POSIX permission bits")
def test_saved_file_is_world_readable(tmp_path: Path) -> None:
    path = tmp_path / "tasks.json"
    TaskStore(path).add("a")
    assert stat.S_IMODE(path.stat().st_mode) == 0o644
