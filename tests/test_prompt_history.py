import json
from concurrent.futures import ThreadPoolExecutor

import pytest

from lokal.core.kv_store import JsonFileKeyValueStore, MemoryKeyValueStore
from lokal.services.prompt_history import (
    MAX_HISTORY_ENTRIES,
    clear_prompt_history,
    get_prompt_history,
    history_key,
    save_prompt,
)


def test_newest_entry_first_and_capped():
    store = MemoryKeyValueStore()

    for index in range(MAX_HISTORY_ENTRIES + 1):
        save_prompt(store, "user-1", {"type": "search", "prompt": f"query {index}"})

    history = get_prompt_history(store, "user-1")
    assert len(history) == MAX_HISTORY_ENTRIES
    assert history[0]["prompt"] == f"query {MAX_HISTORY_ENTRIES}"
    assert "query 0" not in {entry["prompt"] for entry in history}


def test_filter_by_type():
    store = MemoryKeyValueStore()
    save_prompt(store, "user-1", {"type": "search", "prompt": "tacos"})
    save_prompt(
        store,
        "user-1",
        {"type": "email_gen", "prompt": "Invite Fix-It Bikes", "params": {"name": "Fix-It Bikes"}},
    )

    emails = get_prompt_history(store, "user-1", "email_gen")

    assert [entry["prompt"] for entry in emails] == ["Invite Fix-It Bikes"]
    assert emails[0]["params"] == {"name": "Fix-It Bikes"}
    assert len(get_prompt_history(store, "user-1")) == 2


def test_history_is_kept_per_user():
    store = MemoryKeyValueStore()
    save_prompt(store, "admin-1", {"type": "email_gen", "prompt": "Secret Target Cafe"})
    save_prompt(store, "user-9", {"type": "search", "prompt": "pizza"})

    clear_prompt_history(store, "user-9")

    assert get_prompt_history(store, "user-9") == []
    assert [entry["prompt"] for entry in get_prompt_history(store, "admin-1")] == ["Secret Target Cafe"]


def test_unknown_type_is_rejected():
    with pytest.raises(ValueError):
        save_prompt(MemoryKeyValueStore(), "user-1", {"type": "poetry", "prompt": "hello"})


def test_clear_removes_all_entries():
    store = MemoryKeyValueStore()
    save_prompt(store, "user-1", {"type": "deal_gen", "prompt": "Pizza deal"})

    clear_prompt_history(store, "user-1")

    assert get_prompt_history(store, "user-1") == []


def test_subscribers_see_changes():
    store = MemoryKeyValueStore()
    seen = []
    unsubscribe = store.subscribe(lambda key, value: seen.append((key, len(value or []))))

    save_prompt(store, "user-1", {"type": "search", "prompt": "coffee"})
    clear_prompt_history(store, "user-1")
    unsubscribe()
    save_prompt(store, "user-1", {"type": "search", "prompt": "bagels"})

    assert seen == [(history_key("user-1"), 1), (history_key("user-1"), 0)]


def test_returned_history_is_a_copy():
    store = MemoryKeyValueStore()
    save_prompt(store, "user-1", {"type": "search", "prompt": "coffee"})

    get_prompt_history(store, "user-1").clear()

    assert len(get_prompt_history(store, "user-1")) == 1


def test_concurrent_saves_keep_every_entry():
    store = MemoryKeyValueStore()

    with ThreadPoolExecutor(max_workers=8) as pool:
        list(pool.map(lambda i: save_prompt(store, "user-1", {"type": "search", "prompt": f"q{i}"}), range(40)))

    assert len(get_prompt_history(store, "user-1")) == 40


def test_json_file_store_survives_restart(tmp_path):
    path = tmp_path / "state" / "lokal_state.json"
    save_prompt(JsonFileKeyValueStore(path), "user-1", {"type": "search", "prompt": "ramen"})

    reopened = JsonFileKeyValueStore(path)

    assert [entry["prompt"] for entry in get_prompt_history(reopened, "user-1")] == ["ramen"]
    assert history_key("user-1") in json.loads(path.read_text(encoding="utf-8"))


def test_json_file_store_ignores_corrupt_file(tmp_path):
    path = tmp_path / "lokal_state.json"
    path.write_text("{not json", encoding="utf-8")

    assert get_prompt_history(JsonFileKeyValueStore(path), "user-1") == []
