import json
from pathlib import Path

from alarms.models import AlarmRecord
from alarms.storage import load_records, save_records
from alarms.store import AlarmStore


class NullGateway:
    def schedule(self, record):
        pass

    def cancel(self, alarm_id):
        pass


def test_missing_file_loads_empty(tmp_path: Path):
    assert load_records(tmp_path / "none.json") == []


def test_save_creates_parent_and_keeps_order(tmp_path: Path):
    path = tmp_path / "nested" / "alarms.json"
    records = [AlarmRecord.create("09:00", label="闹钟"), AlarmRecord.create("06:00")]
    save_records(path, records)
    assert load_records(path) == records
    assert "闹钟" in path.read_text(encoding="utf-8")


def test_corrupted_file_and_items_are_skipped(tmp_path: Path):
    broken = tmp_path / "broken.json"
    broken.write_text("{not json", encoding="utf-8")
    assert load_records(broken) == []

    partial = tmp_path / "partial.json"
    good = AlarmRecord.create("07:00")
    partial.write_text(
        json.dumps([good.to_dict(), {"label": "no time"}, {"id": "x", "time": "7am"}]),
        encoding="utf-8",
    )
    assert load_records(partial) == [good]


def test_non_list_payload_loads_empty(tmp_path: Path):
    for content in ("5", "1.5", "true", '{"id": "x", "time": "07:00"}'):
        path = tmp_path / "alarms.json"
        path.write_text(content, encoding="utf-8")
        assert load_records(path) == []


def test_restore_survives_scalar_storage_file(tmp_path: Path):
    path = tmp_path / "alarms.json"
    path.write_text("5", encoding="utf-8")
    store = AlarmStore(NullGateway(), storage_path=path)
    assert store.restore() == []
    assert store.list() == ()


def test_non_bool_enabled_flag_is_skipped(tmp_path: Path):
    path = tmp_path / "alarms.json"
    good = AlarmRecord.create("07:00")
    bad = dict(AlarmRecord.create("08:00").to_dict(), is_enabled="false")
    path.write_text(json.dumps([bad, good.to_dict(), 3]), encoding="utf-8")
    assert load_records(path) == [good]


def test_save_replaces_file_without_leftovers(tmp_path: Path):
    path = tmp_path / "alarms.json"
    save_records(path, [AlarmRecord.create("07:00")])
    save_records(path, [])
    assert load_records(path) == []
    assert [p.name for p in tmp_path.iterdir()] == ["alarms.json"]
