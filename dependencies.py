"""
FastAPI dependency providers.

All injectable dependencies are defined here as plain functions used with
FastAPI's Depends() system. Services are built once in the app
lifespan and stored on app.state.
"""

from __future__ import annotations

from typing import Optional

from fastapi import Header, Request

from errors import AuthenticationError
from services.auth_service import AuthService


def get_auth_service(request: Request) -> AuthService:
    """Return the AuthService wired up in the lifespan."""
    return request.app.state.auth_service


def get_bearer_token(authorization: Optional[str] = Header(default=None)) -> str:
    """Extract the token from an ``Authorization: Bearer <token>`` header."""
    if not authorization:
        raise AuthenticationError("no token provided", code="missing_token")
    scheme, _, token = authorization.partition(" ")
    token = token.strip()
    if scheme.lower() != "bearer" or not token:
        raise AuthenticationError("invalid authorization header", code="invalid_token")
    return token
