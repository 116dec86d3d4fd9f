from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel, Field

from lokal.ai.base import AIStatus
from lokal.ai.gateway import AIGateway, get_ai_gateway
from lokal.core.kv_store import KeyValueStore
from lokal.deps import get_state_store, require_admin
from lokal.models.profile import UserProfile
from lokal.services.prompt_history import save_prompt

router = APIRouter(prefix="/api/admin/ai", tags=["admin-ai"])

PERMISSION_REMEDIATION = "The AI key was rejected or is out of quota. Select a key with access to this model and try again."
CONFIGURATION_REMEDIATION = "No AI API key is configured on the server."


class LeadSearch(BaseModel):
    lat: float = Field(..., ge=-90, le=90)
    lng: float = Field(..., ge=-180, le=180)
    city: str = "Downtown"


class BusinessPrompt(BaseModel):
    name: str = Field(..., min_length=1)
    type: str = Field(..., min_length=1)


class DealToAnalyze(BaseModel):
    title: str = Field(..., min_length=1)
    description: Optional[str] = None
    discount: Optional[str] = None


@router.post("/leads")
def suggest_leads(
    payload: LeadSearch,
    _admin: UserProfile = Depends(require_admin),
    gateway: AIGateway = Depends(get_ai_gateway),
):
    result = gateway.fetch_business_leads(payload.lat, payload.lng, payload.city)
    return {"status": result.status.value, "data": result.value}


@router.post("/outreach-email")
def outreach_email(
    payload: BusinessPrompt,
    admin: UserProfile = Depends(require_admin),
    gateway: AIGateway = Depends(get_ai_gateway),
    store: KeyValueStore = Depends(get_state_store),
):
    save_prompt(store, admin.id, {"type": "email_gen", "prompt": payload.name, "params": {"type": payload.type}})
    result = gateway.generate_outreach_email(payload.name, payload.type)

    if result.status == AIStatus.PERMISSION_ERROR:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail={"status": result.status.value, "message": PERMISSION_REMEDIATION, "action": "select_key"},
        )
    if result.status == AIStatus.CONFIGURATION_ERROR:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail={"status": result.status.value, "message": CONFIGURATION_REMEDIATION},
        )
    if result.status == AIStatus.ERROR:
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail={"status": result.status.value, "message": "Failed to generate email."},
        )
    return result.value


@router.post("/deal-content")
def deal_content(
    payload: BusinessPrompt,
    admin: UserProfile = Depends(require_admin),
    gateway: AIGateway = Depends(get_ai_gateway),
    store: KeyValueStore = Depends(get_state_store),
):
    save_prompt(store, admin.id, {"type": "deal_gen", "prompt": payload.name, "params": {"type": payload.type}})
    result = gateway.generate_deal_content(payload.name, payload.type)
    return {"status": result.status.value, "data": result.value}


@router.post("/analyze-deal")
def analyze_deal(
    payload: DealToAnalyze,
    _admin: UserProfile = Depends(require_admin),
    gateway: AIGateway = Depends(get_ai_gateway),
):
    result = gateway.analyze_deal(payload.model_dump())
    return {"status": result.status.value, "advice": result.value}
