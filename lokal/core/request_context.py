from __future__ import annotations

from contextlib import contextmanager
from contextvars import ContextVar
from typing import Iterator, Optional

_REQUEST_ID_CTX: ContextVar[Optional[str]] = ContextVar("lokal_request_id", default=None)
_USER_ID_CTX: ContextVar[Optional[str]] = ContextVar("lokal_user_id", default=None)


@contextmanager
def bound_request(request_id: str) -> Iterator[None]:
    """Binds the request id (and a cleared user id) for the duration of one request."""
    request_token = _REQUEST_ID_CTX.set(request_id)
    user_token = _USER_ID_CTX.set(None)
    try:
        yield
    finally:
        _USER_ID_CTX.reset(user_token)
        _REQUEST_ID_CTX.reset(request_token)


def bind_user(user_id: Optional[str]) -> None:
    _USER_ID_CTX.set(user_id)


def get_request_id() -> Optional[str]:
    return _REQUEST_ID_CTX.get()


def get_user_id() -> Optional[str]:
    return _USER_ID_CTX.get()
