from __future__ import annotations

from typing import Literal, Optional

from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel

from lokal.core.kv_store import KeyValueStore
from lokal.deps import get_current_identity, get_state_store
from lokal.services.identity import AuthIdentity
from lokal.services.preferences import get_preferences, update_preferences
from lokal.services.prompt_history import clear_prompt_history, get_prompt_history

router = APIRouter(prefix="/api", tags=["local-state"])


class PreferencesUpdate(BaseModel):
    dark_mode: Optional[bool] = None
    sound: Optional[bool] = None
    haptic: Optional[bool] = None


@router.get("/prompt-history")
def read_prompt_history(
    type: Optional[Literal["search", "deal_gen", "email_gen"]] = None,
    identity: AuthIdentity = Depends(get_current_identity),
    store: KeyValueStore = Depends(get_state_store),
):
    return get_prompt_history(store, identity.id, type)


@router.delete("/prompt-history")
def delete_prompt_history(
    identity: AuthIdentity = Depends(get_current_identity),
    store: KeyValueStore = Depends(get_state_store),
):
    clear_prompt_history(store, identity.id)
    return {"ok": True}


@router.get("/preferences")
def read_preferences(
    identity: AuthIdentity = Depends(get_current_identity),
    store: KeyValueStore = Depends(get_state_store),
):
    return get_preferences(store, identity.id)


@router.patch("/preferences")
def patch_preferences(
    payload: PreferencesUpdate,
    identity: AuthIdentity = Depends(get_current_identity),
    store: KeyValueStore = Depends(get_state_store),
):
    try:
        return update_preferences(store, identity.id, payload.model_dump(exclude_none=True))
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
