"""
Request DTOs for authentication endpoints.

SignupRequest         — POST /api/v1/auth/signup
LoginRequest          — POST /api/v1/auth/login
SendOtpRequest        — POST /api/v1/auth/send-otp
VerifyOtpRequest      — POST /api/v1/auth/verify
ResetPasswordRequest  — POST /api/v1/auth/reset
RefreshRequest        — POST /api/v1/auth/refresh

String fields are trimmed; emails are additionally lowercased so every
lookup downstream works on the normalised form.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator

from shared.validators import normalize_email


class _EmailRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True, str_strip_whitespace=True)

    email: EmailStr

    @field_validator("email", mode="before")
    @classmethod
    def _normalize_email(cls, value: object) -> object:
        if isinstance(value, str):
            return normalize_email(value)
        return value


class SignupRequest(_EmailRequest):
    """Request body for POST /api/v1/auth/signup."""

    name: str = Field(min_length=1)
    password: str = Field(min_length=1)


class LoginRequest(_EmailRequest):
    """Request body for POST /api/v1/auth/login."""

    password: str = Field(min_length=1)


class SendOtpRequest(_EmailRequest):
    """Request body for POST /api/v1/auth/send-otp.

    ``for_signup`` selects the signup code; false requests a password-reset code.
    """

    for_signup: bool = False


class VerifyOtpRequest(_EmailRequest):
    """Request body for POST /api/v1/auth/verify."""

    otp: int = Field(strict=True)


class ResetPasswordRequest(_EmailRequest):
    """Request body for POST /api/v1/auth/reset."""

    otp: int = Field(strict=True)
    new_password: str = Field(min_length=1)


class RefreshRequest(BaseModel):
    """Request body for POST /api/v1/auth/refresh."""

    model_config = ConfigDict(populate_by_name=True, str_strip_whitespace=True)

    refresh_token: str = Field(min_length=1)
