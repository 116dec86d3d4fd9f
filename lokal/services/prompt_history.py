from __future__ import annotations

import uuid
from datetime import datetime, timezone
from typing import Any, Optional

from lokal.core.kv_store import KeyValueStore

PROMPT_HISTORY_KEY = "lokal_prompt_history"
MAX_HISTORY_ENTRIES = 50
PROMPT_TYPES = {"search", "deal_gen", "email_gen"}


def history_key(user_id: str) -> str:
    return f"{PROMPT_HISTORY_KEY}:{user_id}"


def save_prompt(store: KeyValueStore, user_id: str, entry: dict[str, Any]) -> dict[str, Any]:
    """Prepends an AI invocation to the user's history, keeping the newest 50."""
    prompt_type = entry.get("type")
    if prompt_type not in PROMPT_TYPES:
        raise ValueError(f"Unknown prompt type: {prompt_type}")

    record = {
        "id": entry.get("id") or str(uuid.uuid4()),
        "type": prompt_type,
        "prompt": entry.get("prompt", ""),
        "params": dict(entry.get("params") or {}),
        "created_at": entry.get("created_at") or datetime.now(timezone.utc).isoformat(),
    }
    store.update(
        history_key(user_id),
        lambda history: [record, *(history or [])][:MAX_HISTORY_ENTRIES],
        default=[],
    )
    return record


def get_prompt_history(
    store: KeyValueStore,
    user_id: str,
    prompt_type: Optional[str] = None,
) -> list[dict[str, Any]]:
    history = store.get(history_key(user_id), []) or []
    if prompt_type:
        return [entry for entry in history if entry.get("type") == prompt_type]
    return history


def clear_prompt_history(store: KeyValueStore, user_id: str) -> None:
    store.delete(history_key(user_id))
