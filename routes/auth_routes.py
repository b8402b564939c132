"""
Authentication endpoints, grouped under /api/v1/auth.

POST /signup    — create an unverified account and email a signup code
POST /login     — exchange credentials for access + refresh tokens
POST /send-otp  — re-send a signup code or send a password-reset code
POST /verify    — confirm a signup code
POST /reset     — set a new password with a reset code
POST /refresh   — exchange a refresh token for a new token pair
"""

from __future__ import annotations

from fastapi import APIRouter, Depends

from dependencies import get_auth_service
from schemas.dto.requests.auth import (
    LoginRequest,
    RefreshRequest,
    ResetPasswordRequest,
    SendOtpRequest,
    SignupRequest,
    VerifyOtpRequest,
)
from schemas.dto.responses.auth import TokenPairResponse
from schemas.dto.responses.common import MessageResponse
from services.auth_service import AuthService

router = APIRouter(prefix="/api/v1/auth", tags=["auth"])


@router.post("/signup", response_model=MessageResponse)
async def signup(
    body: SignupRequest, auth: AuthService = Depends(get_auth_service)
) -> MessageResponse:
    await auth.signup(body.name, body.email, body.password)
    return MessageResponse(message="successfully signed up and sent otp")


@router.post("/login", response_model=TokenPairResponse)
async def login(
    body: LoginRequest, auth: AuthService = Depends(get_auth_service)
) -> TokenPairResponse:
    tokens = await auth.login(body.email, body.password)
    return TokenPairResponse(
        access_token=tokens.access_token, refresh_token=tokens.refresh_token
    )


@router.post("/send-otp", response_model=MessageResponse)
async def send_otp(
    body: SendOtpRequest, auth: AuthService = Depends(get_auth_service)
) -> MessageResponse:
    await auth.send_otp(body.email, body.for_signup)
    return MessageResponse(message="otp sent successfully")


@router.post("/verify", response_model=MessageResponse)
async def verify_otp(
    body: VerifyOtpRequest, auth: AuthService = Depends(get_auth_service)
) -> MessageResponse:
    await auth.verify_otp(body.email, body.otp)
    return MessageResponse(message="otp verified successfully")


@router.post("/reset", response_model=MessageResponse)
async def reset_password(
    body: ResetPasswordRequest, auth: AuthService = Depends(get_auth_service)
) -> MessageResponse:
    await auth.reset_password(body.email, body.otp, body.new_password)
    return MessageResponse(message="successfully changed password")


@router.post("/refresh", response_model=TokenPairResponse)
async def refresh(
    body: RefreshRequest, auth: AuthService = Depends(get_auth_service)
) -> TokenPairResponse:
    tokens = await auth.refresh(body.refresh_token)
    return TokenPairResponse(
        access_token=tokens.access_token, refresh_token=tokens.refresh_token
    )
