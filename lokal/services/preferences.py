from __future__ import annotations

from typing import Any

from lokal.core.kv_store import KeyValueStore

PREFERENCES_KEY = "lokal_settings"
DEFAULT_PREFERENCES = {"dark_mode": False, "sound": True, "haptic": True}


def preferences_key(user_id: str) -> str:
    return f"{PREFERENCES_KEY}:{user_id}"


def _with_defaults(stored: dict[str, Any] | None) -> dict[str, bool]:
    stored = stored or {}
    return {key: bool(stored.get(key, default)) for key, default in DEFAULT_PREFERENCES.items()}


def get_preferences(store: KeyValueStore, user_id: str) -> dict[str, bool]:
    return _with_defaults(store.get(preferences_key(user_id), {}))


def update_preferences(store: KeyValueStore, user_id: str, patch: dict[str, Any]) -> dict[str, bool]:
    unknown = set(patch) - set(DEFAULT_PREFERENCES)
    if unknown:
        raise ValueError(f"Unknown preferences: {', '.join(sorted(unknown))}")

    def _apply(stored: dict[str, Any] | None) -> dict[str, bool]:
        preferences = _with_defaults(stored)
        preferences.update({key: bool(value) for key, value in patch.items() if value is not None})
        return preferences

    return store.update(preferences_key(user_id), _apply, default={})
