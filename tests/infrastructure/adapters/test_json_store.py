import json

import pytest

from kioku.domain.mastery.models import MasteryRecord
from kioku.domain.mastery.ports import StoreError
from kioku.infrastructure.adapters.json_store import InMemoryMasteryStore, JsonFileMasteryStore


def test_missing_file_is_empty_store(json_store):
    assert json_store.get(1) is None
    assert json_store.all() == []


def test_put_then_get(json_store, store_file):
    record = MasteryRecord(
        item_id=12,
        knowledge_level=6,
        ease_factor=2.8,
        consecutive_correct=4,
        total_reviews=9,
        correct_reviews=7,
        last_reviewed_at=1_700_000_000,
        next_review_at=1_700_777_600,
    )
    json_store.put(record)

    assert json_store.get(12) == record
    # Fresh instance reads the same document back
    assert JsonFileMasteryStore(store_file).get(12) == record

    document = json.loads(store_file.read_text(encoding="utf-8"))
    assert document["version"] == 1
    assert document["items"]["12"]["knowledge_level"] == 6
    assert document["items"]["12"]["item_id"] == 12


def test_string_and_int_ids(json_store):
    json_store.put(MasteryRecord(item_id="neko", knowledge_level=1))
    json_store.put(MasteryRecord(item_id=3, knowledge_level=2))

    ids = sorted(str(r.item_id) for r in json_store.all())
    assert ids == ["3", "neko"]
    assert json_store.get("neko").item_id == "neko"
    assert json_store.get(3).item_id == 3


def test_put_replaces_existing(json_store):
    json_store.put(MasteryRecord(item_id=1, knowledge_level=1))
    json_store.put(MasteryRecord(item_id=1, knowledge_level=5))

    assert json_store.get(1).knowledge_level == 5
    assert len(json_store.all()) == 1


def test_creates_parent_directories(tmp_path):
    store = JsonFileMasteryStore(tmp_path / "nested" / "dir" / "m.json")
    store.put(MasteryRecord(item_id=1))
    assert (tmp_path / "nested" / "dir" / "m.json").exists()


def test_no_temp_files_left_behind(json_store, store_file):
    json_store.put(MasteryRecord(item_id=1))
    leftovers = [p for p in store_file.parent.iterdir() if p.suffix == ".tmp"]
    assert leftovers == []


def test_corrupt_file_raises(json_store, store_file):
    store_file.write_text("{not json", encoding="utf-8")
    with pytest.raises(StoreError):
        json_store.get(1)


def test_wrong_shape_raises(json_store, store_file):
    store_file.write_text(json.dumps({"version": 1}), encoding="utf-8")
    with pytest.raises(StoreError):
        json_store.all()


def test_unknown_field_raises(json_store, store_file):
    store_file.write_text(
        json.dumps({"version": 1, "items": {"1": {"bogus": True}}}), encoding="utf-8"
    )
    with pytest.raises(StoreError):
        json_store.get(1)


def test_in_memory_store():
    store = InMemoryMasteryStore([MasteryRecord(item_id=1, knowledge_level=3)])

    assert store.get(1).knowledge_level == 3
    assert store.get("1").knowledge_level == 3
    store.put(MasteryRecord(item_id=2))
    assert len(store.all()) == 2


@pytest.mark.parametrize("item_id", ["007", "٧", "12a", 7, 0])
def test_item_id_type_survives_round_trip(json_store, store_file, item_id):
    json_store.put(MasteryRecord(item_id=item_id, knowledge_level=3))

    restored = JsonFileMasteryStore(store_file).get(item_id)
    assert restored.item_id == item_id
    assert type(restored.item_id) is type(item_id)
    assert [r.item_id for r in json_store.all()] == [item_id]


def test_zero_padded_id_does_not_collide_with_int(json_store):
    json_store.put(MasteryRecord(item_id="007", knowledge_level=1))
    json_store.put(MasteryRecord(item_id=7, knowledge_level=5))

    assert json_store.get("007").knowledge_level == 1
    assert json_store.get(7).knowledge_level == 5


def test_document_without_item_id_parses_key(json_store, store_file):
    store_file.write_text(
        json.dumps({"version": 1, "items": {"12": {"knowledge_level": 4}, "007": {}}}),
        encoding="utf-8",
    )

    assert json_store.get(12).item_id == 12
    assert json_store.get("007").item_id == "007"
