from __future__ import annotations

import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from lokal.core.database import get_db
from lokal.deps import get_current_identity, get_current_profile
from lokal.models.profile import UserProfile
from lokal.services.catalog import get_deal
from lokal.services.identity import AuthIdentity
from lokal.services.profiles import serialize_profile, update_user_profile
from lokal.services.redemptions import REDEMPTION_POINTS, get_redemption_count, redeem_deal
from lokal.services.saved_deals import get_saved_deals, is_deal_saved, toggle_save_deal

router = APIRouter(prefix="/api", tags=["profile"])

logger = logging.getLogger(__name__)


class ProfileOut(BaseModel):
    id: str
    email: Optional[str] = None
    role: str
    points: int
    full_name: Optional[str] = None
    avatar_url: Optional[str] = None


class ProfileUpdate(BaseModel):
    full_name: Optional[str] = None
    avatar_url: Optional[str] = None


@router.get("/profile", response_model=ProfileOut)
def read_profile(profile: UserProfile = Depends(get_current_profile)):
    return serialize_profile(profile)


@router.patch("/profile", response_model=ProfileOut)
def patch_profile(
    payload: ProfileUpdate,
    profile: UserProfile = Depends(get_current_profile),
    db: Session = Depends(get_db),
):
    if not update_user_profile(db, profile.id, payload.model_dump(exclude_unset=True)):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Could not update profile")
    db.refresh(profile)
    return serialize_profile(profile)


@router.get("/profile/saved-deals")
def list_saved_deals(
    identity: AuthIdentity = Depends(get_current_identity),
    db: Session = Depends(get_db),
):
    return get_saved_deals(db, identity.id)


@router.get("/profile/redemptions/count")
def redemption_count(
    identity: AuthIdentity = Depends(get_current_identity),
    db: Session = Depends(get_db),
):
    return {"count": get_redemption_count(db, identity.id)}


@router.post("/deals/{deal_id}/save")
def save_deal(
    deal_id: str,
    identity: AuthIdentity = Depends(get_current_identity),
    db: Session = Depends(get_db),
):
    if get_deal(db, deal_id) is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Deal not found")
    return {"deal_id": deal_id, "saved": toggle_save_deal(db, identity.id, deal_id)}


@router.get("/deals/{deal_id}/saved")
def deal_saved_state(
    deal_id: str,
    identity: AuthIdentity = Depends(get_current_identity),
    db: Session = Depends(get_db),
):
    return {"deal_id": deal_id, "saved": is_deal_saved(db, identity.id, deal_id)}


@router.post("/deals/{deal_id}/redeem")
def redeem(
    deal_id: str,
    profile: UserProfile = Depends(get_current_profile),
    identity: AuthIdentity = Depends(get_current_identity),
    db: Session = Depends(get_db),
):
    try:
        redeemed = redeem_deal(db, identity.id, deal_id, email=identity.email)
    except SQLAlchemyError as exc:
        db.rollback()
        logger.exception("Redemption failed deal_id=%s", deal_id)
        raise HTTPException(status_code=500, detail="Could not redeem this deal. Please try again.") from exc

    if not redeemed:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Could not redeem this deal.")

    db.refresh(profile)
    return {"ok": True, "points_awarded": REDEMPTION_POINTS, "points": int(profile.points or 0)}
