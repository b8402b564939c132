"""
User document model.

Maps to the `users` MongoDB collection.

The password is stored only as an argon2 hash. is_verified flips to True
once the signup OTP has been confirmed.
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from schemas.models.base import MongoBaseModel


class UserDoc(MongoBaseModel):
    """Document model for the `users` collection."""

    name: str
    password_hash: str
    is_verified: bool = False
    created_at: Optional[datetime] = None
