from __future__ import annotations

import logging
from typing import Iterable, Optional

from sqlalchemy import func
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from lokal.core import config
from lokal.models.profile import ROLE_ADMIN, ROLE_CONSUMER, UserProfile

logger = logging.getLogger(__name__)

ADMIN_BOOTSTRAP_POINTS = 999
CONSUMER_STARTING_POINTS = 50
EDITABLE_PROFILE_FIELDS = ("full_name", "avatar_url")


def resolve_role(email: Optional[str], super_admin_emails: Optional[Iterable[str]] = None) -> str:
    allow_list = config.SUPER_ADMIN_EMAILS if super_admin_emails is None else {
        value.strip().lower() for value in super_admin_emails
    }
    if email and email.strip().lower() in allow_list:
        return ROLE_ADMIN
    return ROLE_CONSUMER


def is_admin(profile: Optional[UserProfile]) -> bool:
    return bool(profile) and (profile.role or "").strip().lower() == ROLE_ADMIN


def get_user_profile(db: Session, user_id: str, email: Optional[str] = None) -> UserProfile:
    """Loads the profile for ``user_id``, creating it on first access.

    The role of a new profile comes from the super-admin allow-list. When the
    insert is rejected by the store, the unsaved profile is returned so the
    caller is never blocked; it may then diverge from the stored state.
    """
    profile = db.query(UserProfile).filter(UserProfile.id == user_id).first()
    if profile:
        return profile

    role = resolve_role(email)
    profile = UserProfile(
        id=user_id,
        email=email,
        role=role,
        points=ADMIN_BOOTSTRAP_POINTS if role == ROLE_ADMIN else CONSUMER_STARTING_POINTS,
    )
    logger.info("[DB] Creating profile user_id=%s role=%s", user_id, role)
    try:
        db.add(profile)
        db.commit()
        db.refresh(profile)
    except SQLAlchemyError as exc:
        db.rollback()
        logger.error("[DB] Error creating profile user_id=%s: %s", user_id, exc)
        return UserProfile(
            id=user_id,
            email=email,
            role=role,
            points=ADMIN_BOOTSTRAP_POINTS if role == ROLE_ADMIN else CONSUMER_STARTING_POINTS,
        )
    return profile


def update_user_profile(db: Session, user_id: str, updates: dict) -> bool:
    logger.info("[DB] Updating Profile: %s", user_id)
    patch = {key: value for key, value in updates.items() if key in EDITABLE_PROFILE_FIELDS and value is not None}
    if not patch:
        return True
    try:
        updated = db.query(UserProfile).filter(UserProfile.id == user_id).update(patch)
        db.commit()
    except SQLAlchemyError as exc:
        db.rollback()
        logger.error("[DB] Profile Update Error user_id=%s: %s", user_id, exc)
        return False
    return updated > 0


def serialize_profile(profile: UserProfile) -> dict:
    return {
        "id": profile.id,
        "email": profile.email,
        "role": profile.role,
        "points": int(profile.points or 0),
        "full_name": profile.full_name,
        "avatar_url": profile.avatar_url,
    }


def set_profile_role(db: Session, *, email: str, role: str) -> Optional[UserProfile]:
    """Changes the role of an existing profile. Used by the admin bootstrap script."""
    normalized_role = (role or "").strip().lower()
    if normalized_role not in {ROLE_ADMIN, ROLE_CONSUMER}:
        raise ValueError("Role must be 'admin' or 'consumer'.")

    profile = db.query(UserProfile).filter(func.lower(UserProfile.email) == email.strip().lower()).first()
    if profile is None:
        return None
    profile.role = normalized_role
    db.commit()
    db.refresh(profile)
    return profile
