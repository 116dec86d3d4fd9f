from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Optional

from jose import jwt

from lokal.core import config


@dataclass(frozen=True)
class AuthIdentity:
    """The only part of the hosted auth session the service consumes."""

    id: str
    email: Optional[str] = None


def decode_token(token: str) -> Dict[str, Any]:
    options = {"verify_aud": config.AUTH_JWT_AUDIENCE is not None}
    return jwt.decode(
        token,
        config.AUTH_JWT_SECRET,
        algorithms=[config.AUTH_JWT_ALGORITHM],
        audience=config.AUTH_JWT_AUDIENCE,
        options=options,
    )


def decode_access_token(token: str) -> AuthIdentity:
    """
    Returns the identity carried by an access token issued by the auth provider,
    or raises ValueError if the token is invalid, expired or has no subject.
    """
    if not config.AUTH_JWT_SECRET:
        raise ValueError("AUTH_JWT_SECRET is not configured")
    try:
        payload = decode_token(token)
    except Exception as e:
        raise ValueError("Invalid or expired token") from e

    subject = payload.get("sub")
    if not subject:
        raise ValueError("Token has no subject")

    email = payload.get("email")
    return AuthIdentity(id=str(subject), email=str(email) if email else None)
