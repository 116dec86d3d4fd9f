from __future__ import annotations

import logging
import time
import uuid
from typing import Optional

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware

from lokal.core.metrics import request_metrics
from lokal.core.request_context import bind_user, bound_request

logger = logging.getLogger(__name__)

REQUEST_ID_HEADER = "X-Request-ID"
UNMATCHED_ROUTE = "<unmatched>"


def route_template(request: Request) -> str:
    """The declared path of the route that handled the request, e.g. ``/api/deals/{deal_id}/save``."""
    route_path = getattr(request.scope.get("route"), "path", None)
    if route_path:
        return route_path
    if "endpoint" not in request.scope:
        return UNMATCHED_ROUTE

    template = request.url.path
    for name, value in request.path_params.items():
        template = template.replace(f"/{value}", f"/{{{name}}}", 1)
    return template


def _identity_id(request: Request) -> Optional[str]:
    identity = getattr(request.state, "identity", None)
    user_id = getattr(identity, "id", None)
    return str(user_id) if user_id is not None else None


class ObservabilityMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next):
        request_id = request.headers.get(REQUEST_ID_HEADER) or str(uuid.uuid4())
        request.state.request_id = request_id

        with bound_request(request_id):
            start = time.perf_counter()
            status_code = 500
            try:
                response = await call_next(request)
                status_code = response.status_code
                response.headers[REQUEST_ID_HEADER] = request_id
                return response
            finally:
                duration_ms = round((time.perf_counter() - start) * 1000, 2)
                route = route_template(request)
                user_id = _identity_id(request)
                bind_user(user_id)
                request_metrics.observe(route, request.method, status_code, duration_ms)
                logger.info(
                    "%s %s -> %s",
                    request.method,
                    route,
                    status_code,
                    extra={
                        "request_id": request_id,
                        "user_id": user_id,
                        "endpoint": route,
                        "method": request.method,
                        "status_code": status_code,
                        "duration_ms": duration_ms,
                    },
                )
