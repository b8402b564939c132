"""CredentialStore protocol — services depend on this, not the concrete implementation.

Every record is keyed by the normalised email. Implementations provide
atomic per-record reads and writes; callers never lock.
"""

from datetime import datetime
from typing import Optional, Protocol

from schemas.models.otp import OtpDoc, OtpPurpose
from schemas.models.user import UserDoc


class CredentialStore(Protocol):
    async def get_user(self, email: str) -> Optional[UserDoc]: ...

    async def create_user(self, user: UserDoc) -> bool:
        """Insert *user*; return False if the email is already registered."""
        ...

    async def upsert_user(self, user: UserDoc) -> None: ...

    async def get_otp(self, email: str) -> Optional[OtpDoc]: ...

    async def upsert_otp(self, record: OtpDoc) -> None: ...

    async def clear_otp_code(
        self, email: str, purpose: OtpPurpose, created_at: datetime
    ) -> bool:
        """Zero the *purpose* code if the live record still has *created_at*.

        The compare and the write are one atomic step. Returns False when the
        record is missing or was re-issued.
        """
        ...

    async def ping(self) -> bool: ...
