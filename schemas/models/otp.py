"""
OTP document model.

Maps to the `otps` MongoDB collection.

One record per email; every issue replaces it. A code field of 0 means no
code is held for that purpose. The record is valid for OTP_TTL_SECONDS after
created_at and is never deleted when it lapses.
"""

from __future__ import annotations

from datetime import datetime
from enum import Enum

from pydantic import Field

from schemas.models.base import MongoBaseModel


class OtpPurpose(str, Enum):
    SIGNUP = "signup"
    RESET_PASSWORD = "reset_password"


class OtpDoc(MongoBaseModel):
    """Document model for the `otps` collection."""

    signup_otp: int = Field(default=0, ge=0)
    reset_password_otp: int = Field(default=0, ge=0)
    created_at: datetime

    def code_for(self, purpose: OtpPurpose) -> int:
        return getattr(self, self.field_for(purpose))

    @staticmethod
    def field_for(purpose: OtpPurpose) -> str:
        if purpose is OtpPurpose.SIGNUP:
            return "signup_otp"
        return "reset_password_otp"
