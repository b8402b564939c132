"""
Health check endpoint.

GET /health — checks the credential store and the notification workers.
Rules:
- Store unreachable → "unhealthy" (503). No flow can run without it.
- Notification workers not running → "degraded" (200). Codes are still
  issued, but emails are not being delivered.
"""

from __future__ import annotations

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse

from schemas.dto.responses.common import HealthResponse

router = APIRouter(tags=["health"])


@router.get("/health", response_model=HealthResponse)
async def health_check(request: Request) -> JSONResponse:
    checks: dict[str, str] = {}
    overall = "healthy"

    try:
        ok = await request.app.state.store.ping()
    except Exception:
        ok = False
    if ok:
        checks["store"] = "ok"
    else:
        checks["store"] = "error"
        overall = "unhealthy"

    notifications = request.app.state.notifications
    if notifications.running:
        checks["notifications"] = "ok"
    else:
        checks["notifications"] = "stopped"
        if overall == "healthy":
            overall = "degraded"

    status_code = 503 if overall == "unhealthy" else 200
    return JSONResponse(
        status_code=status_code,
        content=HealthResponse(status=overall, checks=checks).model_dump(),
    )
