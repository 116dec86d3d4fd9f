import pytest

from lokal.core.kv_store import MemoryKeyValueStore
from lokal.services.preferences import DEFAULT_PREFERENCES, get_preferences, update_preferences


def test_defaults_when_nothing_stored():
    assert get_preferences(MemoryKeyValueStore(), "user-1") == DEFAULT_PREFERENCES


def test_partial_update_keeps_other_values():
    store = MemoryKeyValueStore()

    updated = update_preferences(store, "user-1", {"dark_mode": True})

    assert updated == {"dark_mode": True, "sound": True, "haptic": True}
    assert get_preferences(store, "user-1")["dark_mode"] is True


def test_preferences_are_kept_per_user():
    store = MemoryKeyValueStore()

    update_preferences(store, "user-9", {"dark_mode": True, "sound": False})

    assert get_preferences(store, "admin-1") == DEFAULT_PREFERENCES


def test_none_values_are_ignored():
    store = MemoryKeyValueStore()
    update_preferences(store, "user-1", {"sound": False})

    assert update_preferences(store, "user-1", {"sound": None})["sound"] is False


def test_unknown_keys_are_rejected():
    with pytest.raises(ValueError):
        update_preferences(MemoryKeyValueStore(), "user-1", {"volume": 11})
