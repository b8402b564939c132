"""
One-time passcode lifecycle: issue, verify, consume.

Each email holds at most one OTP record. Issuing a code for either purpose
replaces the record, stamps a fresh created_at and zeroes the other
purpose's code so it cannot be replayed. A record is usable for
``ttl_seconds`` after created_at.
"""

from __future__ import annotations

from datetime import timedelta
from typing import Optional

from errors import ExpiredError, NotFoundError, ValidationError
from repositories.protocol import CredentialStore
from schemas.models.otp import OtpDoc, OtpPurpose
from services.notification_queue import NotificationQueue, OtpNotification
from shared.datetime_utils import Clock, as_utc, utcnow
from shared.generators import generate_otp_code
from shared.logging import get_logger

log = get_logger(__name__)


class OtpService:
    def __init__(
        self,
        store: CredentialStore,
        notifications: NotificationQueue,
        ttl_seconds: int = 300,
        clock: Clock = utcnow,
    ) -> None:
        self._store = store
        self._notifications = notifications
        self._ttl = timedelta(seconds=ttl_seconds)
        self._clock = clock

    async def issue(
        self, email: str, purpose: OtpPurpose, user_name: Optional[str] = None
    ) -> int:
        """Generate, persist and dispatch a fresh code for *email*.

        Delivery is queued, never awaited; a dropped or failed email does
        not fail issuance.
        """
        code = generate_otp_code()
        record = OtpDoc(email=email, created_at=self._clock())
        if purpose is OtpPurpose.SIGNUP:
            record.signup_otp = code
        else:
            record.reset_password_otp = code
        await self._store.upsert_otp(record)

        queued = self._notifications.enqueue(
            OtpNotification(
                email=email, user_name=user_name, otp_code=code, purpose=purpose
            )
        )
        log.info("otp_issued", email=email, purpose=purpose.value, queued=queued)
        return code

    async def verify(self, email: str, purpose: OtpPurpose, code: int) -> OtpDoc:
        """Check *code* against the live record for *email*.

        Raises:
            NotFoundError: no record was ever issued for the email.
            ExpiredError: the record is older than the validity window.
            ValidationError: the stored code for *purpose* is absent or differs.
        """
        record = await self._store.get_otp(email)
        if record is None:
            log.warning("otp_verification_failed", email=email, reason="not_generated")
            raise NotFoundError(
                "otp not generated for this email", code="otp_not_generated"
            )

        if self._clock() - as_utc(record.created_at) > self._ttl:
            log.warning("otp_verification_failed", email=email, reason="expired")
            raise ExpiredError("otp expired", code="otp_expired")

        stored = record.code_for(purpose)
        if stored == 0 or stored != code:
            log.warning(
                "otp_verification_failed",
                email=email,
                reason="incorrect",
                purpose=purpose.value,
            )
            raise ValidationError("otp incorrect", code="otp_incorrect")

        log.info("otp_verified", email=email, purpose=purpose.value)
        return record

    async def consume(self, record: OtpDoc, purpose: OtpPurpose) -> None:
        """Clear the *purpose* code on *record* so it cannot be verified again.

        A record re-issued since *record* was read is left untouched.
        """
        cleared = await self._store.clear_otp_code(
            record.email, purpose, record.created_at
        )
        if not cleared:
            log.info("otp_consume_skipped", email=record.email, reason="reissued")
