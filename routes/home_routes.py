"""
GET /api/v1 — greets the holder of a valid access token.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends

from dependencies import get_auth_service, get_bearer_token
from schemas.dto.responses.common import MessageResponse
from services.auth_service import AuthService

router = APIRouter(tags=["home"])


@router.get("/api/v1", response_model=MessageResponse)
async def home(
    token: str = Depends(get_bearer_token),
    auth: AuthService = Depends(get_auth_service),
) -> MessageResponse:
    user = await auth.identify(token)
    return MessageResponse(message=f"Hello, {user.name}!")
