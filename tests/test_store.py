import json

from store import DEFAULT_COURSES, JsonFileStore, courses_store, next_id, users_store


def test_missing_file_loads_empty(tmp_path):
    assert JsonFileStore(str(tmp_path / "nothing.json")).load() == []


def test_unparsable_file_loads_empty(tmp_path):
    path = tmp_path / "users.json"
    path.write_text("{broken", encoding="utf-8")
    assert JsonFileStore(str(path)).load() == []

    path.write_text('{"id": 1}', encoding="utf-8")
    assert JsonFileStore(str(path)).load() == []


def test_ensure_writes_seed_once(tmp_path):
    store = courses_store(str(tmp_path / "data"))
    store.ensure()
    assert store.load() == DEFAULT_COURSES

    store.save([{"id": 9, "title": "Only"}])
    store.ensure()
    assert store.load() == [{"id": 9, "title": "Only"}]


def test_save_rewrites_whole_document(tmp_path):
    store = users_store(str(tmp_path))
    store.save([{"id": 1}, {"id": 2}])
    store.save([{"id": 3}])

    with open(store.path, encoding="utf-8") as f:
        assert json.load(f) == [{"id": 3}]


def test_next_id():
    assert next_id([]) == 1
    assert next_id([{"id": 4}, {"id": 2}]) == 5


def test_interleaved_writes_lose_the_first_update(tmp_path):
    # no locking around read-modify-write: the later save wins
    store = users_store(str(tmp_path))
    store.save([{"id": 1, "name": "A"}])

    first = store.load()
    second = store.load()
    first[0]["name"] = "from first"
    second.append({"id": 2, "name": "B"})
    store.save(first)
    store.save(second)

    assert store.load() == [{"id": 1, "name": "A"}, {"id": 2, "name": "B"}]
