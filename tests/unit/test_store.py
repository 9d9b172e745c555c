import json
from datetime import datetime, timedelta

from habitual import db, store
from habitual.core.models import Deadline, Frequency, TaskStatus
from habitual.tasks import build_task, toggle_task_today

NOW = datetime(2025, 3, 12, 9, 30)


def test_load_empty(tmp_habitual_dir):
    assert store.load_tasks() == []


def test_save_then_load(tmp_habitual_dir):
    task = toggle_task_today(
        build_task("read", Frequency(), Deadline(NOW + timedelta(days=7)), now=NOW), now=NOW
    )
    store.save_tasks([task])

    loaded = store.load_tasks()
    assert loaded == [task]
    assert loaded[0].instances[0].status is TaskStatus.DONE
    assert loaded[0].instances[0].completed_date == NOW


def test_saved_shape(tmp_habitual_dir):
    task = build_task("read", Frequency(), Deadline(NOW), now=NOW)
    store.save_tasks([task])
    raw = json.loads(db.read_value(store.STORAGE_KEY))
    assert isinstance(raw, list)
    assert set(raw[0]) == {"configuration", "instances"}
    assert raw[0]["configuration"]["createdAt"] == NOW.isoformat()


def test_save_preserves_order(tmp_habitual_dir):
    tasks = [build_task(name, Frequency(), Deadline(NOW), now=NOW) for name in ("c", "a", "b")]
    store.save_tasks(tasks)
    assert [t.content for t in store.load_tasks()] == ["c", "a", "b"]


def test_corrupt_json_yields_empty(tmp_habitual_dir, caplog):
    db.write_value(store.STORAGE_KEY, "{not json")
    with caplog.at_level("WARNING", logger="habitual.store"):
        assert store.load_tasks() == []
    assert "error parsing stored tasks" in caplog.text


def test_wrong_shape_yields_empty(tmp_habitual_dir):
    db.write_value(store.STORAGE_KEY, json.dumps({"configuration": {}}))
    assert store.load_tasks() == []

    db.write_value(store.STORAGE_KEY, json.dumps([{"configuration": {"id": "x"}, "instances": []}]))
    assert store.load_tasks() == []

    db.write_value(store.STORAGE_KEY, json.dumps([42]))
    assert store.load_tasks() == []


def test_missing_database_yields_empty(tmp_path, monkeypatch):
    from habitual import config

    monkeypatch.setattr(config, "DB_PATH", tmp_path / "nowhere" / "habitual.db")
    assert store.load_tasks() == []


def test_legacy_records_are_upcast(tmp_habitual_dir):
    legacy = [
        {
            "id": "1700000000000",
            "content": "floss",
            "status": "not-started",
            "frequency": {"unit": "day", "count": 1},
            "duration": {"startedAt": "2025-01-01T00:00:00", "unit": "month", "length": 3},
            "createdAt": "2025-01-01T09:00:00",
            "completedDates": ["2025-03-10", "2025-03-11"],
        }
    ]
    db.write_value(store.STORAGE_KEY, json.dumps(legacy))
    tasks = store.load_tasks()
    assert len(tasks) == 1
    assert len(tasks[0].instances) == 2


def test_clear(tmp_habitual_dir):
    store.save_tasks([build_task("read", Frequency(), Deadline(NOW), now=NOW)])
    store.clear_tasks()
    assert store.load_tasks() == []


def _legacy(**overrides) -> dict:
    record = {
        "id": "a",
        "content": "x",
        "duration": {"deadline": "2025-12-31"},
        "createdAt": "2025-01-01",
        "completedDates": ["2025-01-02"],
    }
    record.update(overrides)
    return record


def test_legacy_record_with_bad_frequency_yields_empty(tmp_habitual_dir):
    db.write_value(store.STORAGE_KEY, json.dumps([_legacy(frequency="daily")]))
    assert store.load_tasks() == []


def test_legacy_record_with_zero_count_yields_empty(tmp_habitual_dir):
    db.write_value(store.STORAGE_KEY, json.dumps([_legacy(frequency={"unit": "day", "count": 0})]))
    assert store.load_tasks() == []


def test_out_of_range_epoch_yields_empty(tmp_habitual_dir, monkeypatch):
    from habitual.lib import converters

    def _boom(_val):
        raise OSError("timestamp out of range for platform time_t")

    monkeypatch.setattr(converters, "_parse_datetime", _boom)
    db.write_value(store.STORAGE_KEY, json.dumps([_legacy()]))
    assert store.load_tasks() == []
