from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Generic, Optional, TypeVar

T = TypeVar("T")


class AIStatus(str, Enum):
    SUCCESS = "success"
    EMPTY = "empty"
    PERMISSION_ERROR = "permission_error"
    CONFIGURATION_ERROR = "configuration_error"
    ERROR = "error"


class AIError(Exception):
    status = AIStatus.ERROR


class AIConfigurationError(AIError):
    """No API key could be resolved for the Gemini client."""

    status = AIStatus.CONFIGURATION_ERROR


class AIPermissionError(AIError):
    """The key was rejected (HTTP 403 / PERMISSION_DENIED) or is out of quota."""

    status = AIStatus.PERMISSION_ERROR


_ERRORS_BY_STATUS = {
    AIStatus.CONFIGURATION_ERROR: AIConfigurationError,
    AIStatus.PERMISSION_ERROR: AIPermissionError,
    AIStatus.ERROR: AIError,
}


@dataclass
class AIResult(Generic[T]):
    status: AIStatus
    value: T
    error: Optional[str] = None
    sources: list[dict] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return self.status in {AIStatus.SUCCESS, AIStatus.EMPTY}

    def raise_for_status(self) -> "AIResult[T]":
        error_cls = _ERRORS_BY_STATUS.get(self.status)
        if error_cls is not None:
            raise error_cls(self.error or self.status.value)
        return self


def classify_error(exc: BaseException) -> AIStatus:
    if isinstance(exc, AIError):
        return exc.status
    code = getattr(exc, "code", None)
    status = str(getattr(exc, "status", "") or "")
    if code == 403 or status == "PERMISSION_DENIED" or "PERMISSION_DENIED" in str(exc):
        return AIStatus.PERMISSION_ERROR
    return AIStatus.ERROR
