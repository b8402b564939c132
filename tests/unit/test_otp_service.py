"""Unit tests for OtpService."""

from __future__ import annotations

import asyncio

import pytest

from errors import ExpiredError, NotFoundError, ValidationError
from repositories.memory_store import InMemoryCredentialStore
from schemas.models.otp import OtpPurpose
from services.otp_service import OtpService

EMAIL = "a@x.com"


class TestIssue:
    async def test_persists_code_for_purpose(self, otp_service, store, clock):
        code = await otp_service.issue(EMAIL, OtpPurpose.SIGNUP)
        record = await store.get_otp(EMAIL)
        assert record.signup_otp == code
        assert record.reset_password_otp == 0
        assert record.created_at == clock.now
        assert 100_000 <= code <= 999_999

    async def test_queues_notification(self, otp_service, notifications):
        await otp_service.issue(EMAIL, OtpPurpose.SIGNUP, user_name="Name")
        assert notifications.pending == 1

    async def test_full_queue_does_not_fail_issue(self, store, clock, email_provider):
        from services.notification_queue import NotificationQueue
        from services.otp_service import OtpService

        tiny = NotificationQueue(email_provider, max_size=1)
        service = OtpService(store, tiny, clock=clock)
        await service.issue(EMAIL, OtpPurpose.SIGNUP)
        code = await service.issue(EMAIL, OtpPurpose.SIGNUP)
        assert tiny.dropped == 1
        assert (await store.get_otp(EMAIL)).signup_otp == code

    async def test_reset_issue_invalidates_signup_code(self, otp_service, store):
        signup_code = await otp_service.issue(EMAIL, OtpPurpose.SIGNUP)
        reset_code = await otp_service.issue(EMAIL, OtpPurpose.RESET_PASSWORD)
        record = await store.get_otp(EMAIL)
        assert record.signup_otp == 0
        assert record.reset_password_otp == reset_code
        with pytest.raises(ValidationError) as exc:
            await otp_service.verify(EMAIL, OtpPurpose.SIGNUP, signup_code)
        assert exc.value.error_code == "otp_incorrect"

    async def test_signup_issue_invalidates_reset_code(self, otp_service):
        reset_code = await otp_service.issue(EMAIL, OtpPurpose.RESET_PASSWORD)
        await otp_service.issue(EMAIL, OtpPurpose.SIGNUP)
        with pytest.raises(ValidationError):
            await otp_service.verify(EMAIL, OtpPurpose.RESET_PASSWORD, reset_code)

    async def test_reissue_restarts_window(self, otp_service, clock):
        await otp_service.issue(EMAIL, OtpPurpose.SIGNUP)
        clock.advance(minutes=4)
        code = await otp_service.issue(EMAIL, OtpPurpose.SIGNUP)
        clock.advance(minutes=4)
        record = await otp_service.verify(EMAIL, OtpPurpose.SIGNUP, code)
        assert record.signup_otp == code

    async def test_concurrent_issues_leave_one_record(self, otp_service, store):
        codes = await asyncio.gather(
            *(otp_service.issue(EMAIL, OtpPurpose.SIGNUP) for _ in range(10))
        )
        assert store.otp_count() == 1
        record = await store.get_otp(EMAIL)
        assert record.signup_otp in codes


class TestVerify:
    async def test_correct_code(self, otp_service):
        code = await otp_service.issue(EMAIL, OtpPurpose.SIGNUP)
        record = await otp_service.verify(EMAIL, OtpPurpose.SIGNUP, code)
        assert record.email == EMAIL

    async def test_not_generated(self, otp_service):
        with pytest.raises(NotFoundError) as exc:
            await otp_service.verify(EMAIL, OtpPurpose.SIGNUP, 123456)
        assert exc.value.error_code == "otp_not_generated"
        assert exc.value.message == "otp not generated for this email"

    async def test_mismatch(self, otp_service):
        code = await otp_service.issue(EMAIL, OtpPurpose.SIGNUP)
        wrong = 100_000 if code != 100_000 else 100_001
        with pytest.raises(ValidationError) as exc:
            await otp_service.verify(EMAIL, OtpPurpose.SIGNUP, wrong)
        assert exc.value.error_code == "otp_incorrect"

    async def test_wrong_purpose(self, otp_service):
        code = await otp_service.issue(EMAIL, OtpPurpose.SIGNUP)
        with pytest.raises(ValidationError):
            await otp_service.verify(EMAIL, OtpPurpose.RESET_PASSWORD, code)

    async def test_zero_never_matches_absent_code(self, otp_service):
        await otp_service.issue(EMAIL, OtpPurpose.SIGNUP)
        with pytest.raises(ValidationError):
            await otp_service.verify(EMAIL, OtpPurpose.RESET_PASSWORD, 0)

    async def test_valid_at_exact_window_edge(self, otp_service, clock):
        code = await otp_service.issue(EMAIL, OtpPurpose.SIGNUP)
        clock.advance(minutes=5)
        await otp_service.verify(EMAIL, OtpPurpose.SIGNUP, code)

    @pytest.mark.parametrize("correct", [True, False], ids=["right_code", "wrong_code"])
    async def test_expired_regardless_of_code(self, otp_service, clock, correct):
        code = await otp_service.issue(EMAIL, OtpPurpose.SIGNUP)
        clock.advance(minutes=5, seconds=1)
        submitted = code if correct else code + 1
        with pytest.raises(ExpiredError) as exc:
            await otp_service.verify(EMAIL, OtpPurpose.SIGNUP, submitted)
        assert exc.value.error_code == "otp_expired"

    async def test_expired_record_is_kept(self, otp_service, store, clock):
        await otp_service.issue(EMAIL, OtpPurpose.SIGNUP)
        clock.advance(hours=1)
        with pytest.raises(ExpiredError):
            await otp_service.verify(EMAIL, OtpPurpose.SIGNUP, 123456)
        assert await store.get_otp(EMAIL) is not None


class TestConsume:
    async def test_consumed_code_cannot_be_replayed(self, otp_service):
        code = await otp_service.issue(EMAIL, OtpPurpose.SIGNUP)
        record = await otp_service.verify(EMAIL, OtpPurpose.SIGNUP, code)
        await otp_service.consume(record, OtpPurpose.SIGNUP)
        with pytest.raises(ValidationError):
            await otp_service.verify(EMAIL, OtpPurpose.SIGNUP, code)

    async def test_consume_skips_reissued_record(self, otp_service, store, clock):
        code = await otp_service.issue(EMAIL, OtpPurpose.SIGNUP)
        record = await otp_service.verify(EMAIL, OtpPurpose.SIGNUP, code)
        clock.advance(seconds=10)
        fresh = await otp_service.issue(EMAIL, OtpPurpose.SIGNUP)
        await otp_service.consume(record, OtpPurpose.SIGNUP)
        assert (await store.get_otp(EMAIL)).signup_otp == fresh


class YieldingStore(InMemoryCredentialStore):
    """Gives other tasks a turn before each OTP read and clear."""

    async def get_otp(self, email):
        await asyncio.sleep(0)
        return await super().get_otp(email)

    async def clear_otp_code(self, email, purpose, created_at):
        await asyncio.sleep(0)
        return await super().clear_otp_code(email, purpose, created_at)


class TestConsumeInterleaving:
    async def test_issue_during_consume_survives(self, notifications, clock):
        store = YieldingStore()
        service = OtpService(store, notifications, ttl_seconds=300, clock=clock)
        code = await service.issue(EMAIL, OtpPurpose.SIGNUP)
        record = await service.verify(EMAIL, OtpPurpose.SIGNUP, code)

        clock.advance(seconds=5)
        _, fresh = await asyncio.gather(
            service.consume(record, OtpPurpose.SIGNUP),
            service.issue(EMAIL, OtpPurpose.RESET_PASSWORD),
        )

        live = await store.get_otp(EMAIL)
        assert live.reset_password_otp == fresh
        assert live.created_at == clock.now
        verified = await service.verify(EMAIL, OtpPurpose.RESET_PASSWORD, fresh)
        assert verified.email == EMAIL

    async def test_consume_after_issue_leaves_new_code(self, notifications, clock):
        store = YieldingStore()
        service = OtpService(store, notifications, ttl_seconds=300, clock=clock)
        code = await service.issue(EMAIL, OtpPurpose.SIGNUP)
        record = await service.verify(EMAIL, OtpPurpose.SIGNUP, code)

        clock.advance(seconds=5)
        fresh = await service.issue(EMAIL, OtpPurpose.SIGNUP)
        await service.consume(record, OtpPurpose.SIGNUP)

        assert (await store.get_otp(EMAIL)).signup_otp == fresh
