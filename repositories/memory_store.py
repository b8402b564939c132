"""In-memory implementation of CredentialStore.

Used when no MONGODB_URI is configured and throughout the test suite.
Records are copied on the way in and out so callers never share state with
the store. Each method completes without awaiting, so reads and writes are
atomic with respect to other tasks on the event loop.
"""

from datetime import datetime
from typing import Dict, Optional

from schemas.models.otp import OtpDoc, OtpPurpose
from schemas.models.user import UserDoc


class InMemoryCredentialStore:
    def __init__(self) -> None:
        self._users: Dict[str, UserDoc] = {}
        self._otps: Dict[str, OtpDoc] = {}

    async def get_user(self, email: str) -> Optional[UserDoc]:
        user = self._users.get(email)
        return user.model_copy() if user is not None else None

    async def create_user(self, user: UserDoc) -> bool:
        if user.email in self._users:
            return False
        self._users[user.email] = user.model_copy()
        return True

    async def upsert_user(self, user: UserDoc) -> None:
        self._users[user.email] = user.model_copy()

    async def get_otp(self, email: str) -> Optional[OtpDoc]:
        record = self._otps.get(email)
        return record.model_copy() if record is not None else None

    async def upsert_otp(self, record: OtpDoc) -> None:
        self._otps[record.email] = record.model_copy()

    async def clear_otp_code(
        self, email: str, purpose: OtpPurpose, created_at: datetime
    ) -> bool:
        record = self._otps.get(email)
        if record is None or record.created_at != created_at:
            return False
        setattr(record, OtpDoc.field_for(purpose), 0)
        return True

    async def ping(self) -> bool:
        return True

    def otp_count(self) -> int:
        return len(self._otps)
