from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Query, status

from lokal.ai.base import AIResult, AIStatus
from lokal.ai.gateway import AIGateway, get_ai_gateway
from lokal.core.kv_store import KeyValueStore
from lokal.deps import get_current_identity, get_state_store
from lokal.services.identity import AuthIdentity
from lokal.services.prompt_history import save_prompt

router = APIRouter(prefix="/api/discover", tags=["discover"])


def _envelope(result: AIResult) -> dict:
    return {"status": result.status.value, "data": result.value}


@router.get("/location")
def current_location(
    lat: float = Query(..., ge=-90, le=90),
    lng: float = Query(..., ge=-180, le=180),
    _identity: AuthIdentity = Depends(get_current_identity),
    gateway: AIGateway = Depends(get_ai_gateway),
):
    return _envelope(gateway.reverse_geocode(lat, lng))


@router.get("/geocode")
def geocode(
    q: str = Query(..., min_length=1),
    _identity: AuthIdentity = Depends(get_current_identity),
    gateway: AIGateway = Depends(get_ai_gateway),
):
    result = gateway.geocode_city(q)
    if result.status == AIStatus.EMPTY:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="City not found")
    return _envelope(result)


@router.get("/deals")
def nearby_deals(
    lat: float = Query(..., ge=-90, le=90),
    lng: float = Query(..., ge=-180, le=180),
    city: str = Query("Downtown Area"),
    _identity: AuthIdentity = Depends(get_current_identity),
    gateway: AIGateway = Depends(get_ai_gateway),
):
    return _envelope(gateway.fetch_nearby_deals(lat, lng, city))


@router.get("/places")
def search_places(
    q: str = Query(..., min_length=1),
    lat: float = Query(..., ge=-90, le=90),
    lng: float = Query(..., ge=-180, le=180),
    identity: AuthIdentity = Depends(get_current_identity),
    gateway: AIGateway = Depends(get_ai_gateway),
    store: KeyValueStore = Depends(get_state_store),
):
    save_prompt(store, identity.id, {"type": "search", "prompt": q, "params": {"lat": lat, "lng": lng}})
    return _envelope(gateway.search_local_places(q, lat, lng))
