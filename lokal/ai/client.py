from __future__ import annotations

import os
from typing import Any, Callable

from google import genai

from lokal.ai.base import AIConfigurationError
from lokal.core.config import API_KEY_ENV_PRECEDENCE

ClientFactory = Callable[[str], Any]


def resolve_api_key() -> str:
    """Reads the key on every call so a rotated key is picked up without a restart."""
    for name in API_KEY_ENV_PRECEDENCE:
        value = os.getenv(name, "").strip()
        if value:
            return value
    return ""


def build_genai_client(api_key: str) -> genai.Client:
    return genai.Client(api_key=api_key)


def get_ai_client(factory: ClientFactory = build_genai_client) -> Any:
    key = resolve_api_key()
    if not key:
        raise AIConfigurationError(
            f"Missing API key. Set one of: {', '.join(API_KEY_ENV_PRECEDENCE)}."
        )
    return factory(key)
