"""
Authentication flows: signup, login, OTP verification, OTP resend,
password reset, token refresh and identity lookup.

Inputs arrive already parsed by the HTTP layer; emails are normalised again
here so the service is safe to call directly. Each failure raises a typed
AppError and ends the operation; nothing is retried.
"""

from __future__ import annotations

from errors import (
    AuthenticationError,
    InfrastructureError,
    NotFoundError,
    ValidationError,
)
from repositories.protocol import CredentialStore
from schemas.models.otp import OtpPurpose
from schemas.models.user import UserDoc
from services.otp_service import OtpService
from services.token_service import TokenPair, TokenService
from shared.crypto import PasswordHashingError, hash_password, verify_password
from shared.datetime_utils import Clock, utcnow
from shared.logging import get_logger
from shared.validators import normalize_email, validate_password

log = get_logger(__name__)


def _hash_or_raise(password: str) -> str:
    try:
        return hash_password(password)
    except PasswordHashingError as e:
        log.error("password_hashing_failed", error=str(e))
        raise InfrastructureError(
            "failed to hash password", code="password_hashing_failed"
        ) from e


def _check_strength(password: str) -> None:
    ok, reason = validate_password(password)
    if not ok:
        raise ValidationError(reason or "weak password", code="weak_password")


class AuthService:
    def __init__(
        self,
        store: CredentialStore,
        otp_service: OtpService,
        token_service: TokenService,
        consume_otp_on_success: bool = True,
        clock: Clock = utcnow,
    ) -> None:
        self._store = store
        self._otps = otp_service
        self._tokens = token_service
        self._consume_otp = consume_otp_on_success
        self._clock = clock

    async def signup(self, name: str, email: str, password: str) -> None:
        """Create an unverified account and send it a signup code."""
        email = normalize_email(email)
        name = name.strip()
        password = password.strip()

        _check_strength(password)

        user = UserDoc(
            email=email,
            name=name,
            password_hash=_hash_or_raise(password),
            is_verified=False,
            created_at=self._clock(),
        )
        if not await self._store.create_user(user):
            log.warning("signup_failed", reason="email_exists")
            raise ValidationError("email already registered", code="already_registered")

        log.info("user_signed_up", email=email)
        await self._otps.issue(email, OtpPurpose.SIGNUP, user_name=name)

    async def login(self, email: str, password: str) -> TokenPair:
        """Check credentials for a verified account and issue a token pair."""
        email = normalize_email(email)
        password = password.strip()

        user = await self._store.get_user(email)
        if user is None:
            log.warning("login_failed", reason="no_account")
            raise NotFoundError("no account found", code="no_account")

        if not verify_password(password, user.password_hash):
            log.warning("login_failed", reason="invalid_password", email=email)
            raise AuthenticationError(
                "invalid password", code="invalid_password", status_code=400
            )

        if not user.is_verified:
            log.warning("login_failed", reason="not_verified", email=email)
            raise AuthenticationError("user not verified", code="not_verified")

        tokens = self._tokens.issue_pair(user.email)
        log.info("login_success", email=email)
        return tokens

    async def verify_otp(self, email: str, otp: int) -> None:
        """Confirm a signup code and mark the account verified."""
        email = normalize_email(email)

        record = await self._otps.verify(email, OtpPurpose.SIGNUP, otp)

        user = await self._store.get_user(email)
        if user is not None and not user.is_verified:
            user.is_verified = True
            await self._store.upsert_user(user)
        if self._consume_otp:
            await self._otps.consume(record, OtpPurpose.SIGNUP)

        log.info("user_verified", email=email)

    async def send_otp(self, email: str, for_signup: bool) -> None:
        """Re-issue a signup code (unverified accounts) or a reset code (verified ones)."""
        email = normalize_email(email)

        user = await self._store.get_user(email)
        if user is None:
            raise NotFoundError("user not registered", code="not_registered")

        if for_signup and user.is_verified:
            raise ValidationError("user already signed up", code="already_signed_up")

        if not for_signup and not user.is_verified:
            raise ValidationError(
                "user not verified for changing password",
                code="not_verified_for_reset",
            )

        purpose = OtpPurpose.SIGNUP if for_signup else OtpPurpose.RESET_PASSWORD
        await self._otps.issue(email, purpose, user_name=user.name)

    async def reset_password(self, email: str, otp: int, new_password: str) -> None:
        """Replace the password of the account holding a valid reset code."""
        email = normalize_email(email)
        new_password = new_password.strip()

        record = await self._otps.verify(email, OtpPurpose.RESET_PASSWORD, otp)
        _check_strength(new_password)

        user = await self._store.get_user(email)
        if user is None:
            raise NotFoundError("user not registered", code="not_registered")

        user.password_hash = _hash_or_raise(new_password)
        await self._store.upsert_user(user)
        if self._consume_otp:
            await self._otps.consume(record, OtpPurpose.RESET_PASSWORD)

        log.info("password_reset", email=email)

    async def refresh(self, refresh_token: str) -> TokenPair:
        """Exchange a valid refresh token for a new token pair."""
        user = await self._tokens.validate(refresh_token, require_access=False)
        log.info("token_refreshed", email=user.email)
        return self._tokens.issue_pair(user.email)

    async def identify(self, access_token: str) -> UserDoc:
        """Return the account an access token was issued to."""
        return await self._tokens.validate(access_token, require_access=True)
