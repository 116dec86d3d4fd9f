from __future__ import annotations

from fastapi import APIRouter, Depends

from lokal.core.metrics import request_metrics
from lokal.deps import require_admin
from lokal.models.profile import UserProfile

router = APIRouter(prefix="/internal/metrics", tags=["internal-metrics"])


@router.get("/endpoints")
def endpoint_metrics(_admin: UserProfile = Depends(require_admin)):
    return {"endpoints": request_metrics.snapshot()}
