"""
Response DTOs for authentication endpoints.

TokenPairResponse — POST /api/v1/auth/login and /refresh  (200)
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict


class TokenPairResponse(BaseModel):
    """Access and refresh tokens issued together."""

    model_config = ConfigDict(populate_by_name=True)

    access_token: str
    refresh_token: str
