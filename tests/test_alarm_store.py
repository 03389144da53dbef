from pathlib import Path

from alarms.models import AlarmRecord
from alarms.store import ADDED, DELETED, TOGGLED, AlarmStore


class RecordingGateway:
    def __init__(self, fail: bool = False):
        self.calls = []
        self.fail = fail

    def schedule(self, record):
        self.calls.append(("schedule", record.id))
        if self.fail:
            raise RuntimeError("scheduling failed")

    def cancel(self, alarm_id):
        self.calls.append(("cancel", alarm_id))
        if self.fail:
            raise RuntimeError("cancel failed")


def _store(**kwargs):
    gateway = RecordingGateway(**kwargs)
    return AlarmStore(gateway), gateway


def test_add_assigns_unique_ids():
    store, _ = _store()
    for _ in range(50):
        store.add(AlarmRecord.create("06:00"))
    ids = [a.id for a in store.list()]
    assert len(set(ids)) == 50


def test_add_replaces_colliding_id():
    store, gateway = _store()
    first = store.add(AlarmRecord(time="06:00", id="same"))
    second = store.add(AlarmRecord(time="07:00", id="same"))
    assert first.id == "same"
    assert second.id != "same"
    assert [a.id for a in store.list()] == ["same", second.id]
    assert gateway.calls == [("schedule", "same"), ("schedule", second.id)]


def test_add_schedules_even_when_disabled():
    store, gateway = _store()
    record = store.add(AlarmRecord.create("06:00", is_enabled=False))
    assert gateway.calls == [("schedule", record.id)]


def test_double_toggle_restores_state_and_pairs_gateway_calls():
    store, gateway = _store()
    record = store.add(AlarmRecord.create("07:30"))
    gateway.calls.clear()

    off = store.toggle(record.id)
    on = store.toggle(record.id)

    assert off.is_enabled is False
    assert on.is_enabled is True
    assert store.get(record.id).is_enabled is True
    assert gateway.calls == [("cancel", record.id), ("schedule", record.id)]


def test_toggle_from_disabled_schedules_then_cancels():
    store, gateway = _store()
    record = store.add(AlarmRecord.create("07:30", is_enabled=False))
    gateway.calls.clear()

    store.toggle(record.id)
    store.toggle(record.id)

    assert store.get(record.id).is_enabled is False
    assert gateway.calls == [("schedule", record.id), ("cancel", record.id)]


def test_delete_removes_and_cancels_once():
    store, gateway = _store()
    record = store.add(AlarmRecord.create("07:30"))

    removed = store.delete(record.id)

    assert removed.id == record.id
    assert all(a.id != record.id for a in store.list())
    assert gateway.calls.count(("cancel", record.id)) == 1


def test_unknown_id_is_noop():
    store, gateway = _store()
    store.add(AlarmRecord.create("07:30"))
    before = store.list()
    gateway.calls.clear()

    assert store.toggle("missing") is None
    assert store.delete("missing") is None

    assert store.list() == before
    assert gateway.calls == []


def test_list_preserves_insertion_order_across_toggles():
    store, _ = _store()
    a = store.add(AlarmRecord.create("09:00", label="a"))
    b = store.add(AlarmRecord.create("06:00", label="b"))
    c = store.add(AlarmRecord.create("07:00", label="c"))
    store.toggle(b.id)
    store.toggle(a.id)
    assert [r.id for r in store.list()] == [a.id, b.id, c.id]


def test_add_add_delete_scenario():
    store, gateway = _store()
    a = store.add(AlarmRecord.create("07:00", label="A"))
    b = store.add(AlarmRecord.create("08:00", label="B"))

    store.delete(a.id)

    assert store.list() == (b,)
    assert gateway.calls == [("schedule", a.id), ("schedule", b.id), ("cancel", a.id)]


def test_list_is_read_only_snapshot():
    store, _ = _store()
    store.add(AlarmRecord.create("07:00"))
    snapshot = store.list()
    store.add(AlarmRecord.create("08:00"))
    assert isinstance(snapshot, tuple)
    assert len(snapshot) == 1
    assert len(store.list()) == 2


def test_gateway_failure_does_not_roll_back():
    store, gateway = _store(fail=True)
    record = store.add(AlarmRecord.create("07:00"))
    assert store.list() == (record,)

    toggled = store.toggle(record.id)
    assert toggled.is_enabled is False

    store.delete(record.id)
    assert store.list() == ()
    assert [c[0] for c in gateway.calls] == ["schedule", "cancel", "cancel"]


def test_subscribers_receive_changes_and_can_unsubscribe():
    store, _ = _store()
    changes = []
    unsubscribe = store.subscribe(changes.append)

    record = store.add(AlarmRecord.create("07:00"))
    store.toggle(record.id)
    store.toggle("missing")
    unsubscribe()
    store.delete(record.id)

    assert [c.kind for c in changes] == [ADDED, TOGGLED]
    assert changes[1].record.is_enabled is False

    changes_after = []
    store.subscribe(changes_after.append)
    other = store.add(AlarmRecord.create("08:00"))
    store.delete(other.id)
    assert [c.kind for c in changes_after] == [ADDED, DELETED]


def test_failing_listener_does_not_break_mutation():
    store, _ = _store()

    def boom(change):
        raise RuntimeError("listener failed")

    store.subscribe(boom)
    record = store.add(AlarmRecord.create("07:00"))
    assert store.list() == (record,)


def test_write_through_storage_and_restore(tmp_path: Path):
    path = tmp_path / "alarms.json"
    store = AlarmStore(RecordingGateway(), storage_path=path)
    a = store.add(AlarmRecord.create("07:00", label="Gym", repeat_days={1, 5}))
    b = store.add(AlarmRecord.create("08:15"))
    store.toggle(b.id)

    gateway = RecordingGateway()
    restored_store = AlarmStore(gateway, storage_path=path)
    restored = restored_store.restore()

    assert [r.id for r in restored] == [a.id, b.id]
    assert restored_store.get(a.id).repeat_days == frozenset({1, 5})
    assert restored_store.get(b.id).is_enabled is False
    # Only enabled alarms get their trigger back.
    assert gateway.calls == [("schedule", a.id)]


def test_restore_without_storage_path_is_empty():
    store, gateway = _store()
    assert store.restore() == []
    assert gateway.calls == []
