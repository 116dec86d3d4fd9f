from __future__ import annotations

import logging

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from lokal.core import config
from lokal.core.database import get_db
from lokal.core.kv_store import JsonFileKeyValueStore, KeyValueStore
from lokal.models.profile import UserProfile
from lokal.services.identity import AuthIdentity, decode_access_token
from lokal.services.profiles import get_user_profile, is_admin

bearer_scheme = HTTPBearer(auto_error=False)

logger = logging.getLogger(__name__)

_state_store: KeyValueStore | None = None


def get_current_identity(
    request: Request,
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
) -> AuthIdentity:
    """Reads the auth provider's access token and returns the signed-in identity."""
    if credentials is None or not credentials.credentials:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
            headers={"WWW-Authenticate": "Bearer"},
        )
    try:
        identity = decode_access_token(credentials.credentials)
    except ValueError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or expired token",
            headers={"WWW-Authenticate": "Bearer"},
        )
    request.state.identity = identity
    return identity


def get_current_profile(
    identity: AuthIdentity = Depends(get_current_identity),
    db: Session = Depends(get_db),
) -> UserProfile:
    return get_user_profile(db, identity.id, identity.email)


def require_admin(
    request: Request,
    profile: UserProfile = Depends(get_current_profile),
) -> UserProfile:
    if not is_admin(profile):
        logger.warning(
            "Access denied (role_denied): user_id=%s role=%s endpoint=%s %s",
            profile.id,
            profile.role,
            request.method,
            request.url.path,
        )
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Admin access required")
    return profile


def get_state_store() -> KeyValueStore:
    """Per-user prompt history and preferences live here, not in the relational store."""
    global _state_store
    if _state_store is None:
        _state_store = JsonFileKeyValueStore(config.LOKAL_STATE_PATH)
    return _state_store
