"""
Signed bearer tokens (JWT, HS256 by default).

Claims:
    iss — the user's email
    sub — token kind, "ACCESS" or "REFRESH"
    exp — expiry (seconds since epoch)

Tokens are stateless: validation checks the signature, the kind the caller
pins, that the issuer still has an account, and the expiry, in that order.
The signing secret comes from the JWTSettings passed in at construction.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from enum import Enum

import jwt

from config import JWTSettings
from errors import AuthenticationError, ExpiredError, InfrastructureError
from repositories.protocol import CredentialStore
from schemas.models.user import UserDoc
from shared.datetime_utils import Clock, utcnow
from shared.logging import get_logger

log = get_logger(__name__)


class TokenKind(str, Enum):
    ACCESS = "ACCESS"
    REFRESH = "REFRESH"


@dataclass(frozen=True)
class TokenPair:
    access_token: str
    refresh_token: str


class TokenService:
    def __init__(
        self,
        settings: JWTSettings,
        store: CredentialStore,
        clock: Clock = utcnow,
    ) -> None:
        self._secret = settings.secret_key
        self._algorithm = settings.jwt_algorithm
        self._access_ttl = timedelta(seconds=settings.access_token_ttl_seconds)
        self._refresh_ttl = timedelta(seconds=settings.refresh_token_ttl_seconds)
        self._store = store
        self._clock = clock

    def issue(self, email: str, kind: TokenKind, ttl: timedelta) -> str:
        """Sign a token for *email* of *kind* that expires *ttl* from now.

        Raises:
            InfrastructureError: the secret is missing or signing failed.
        """
        if not self._secret:
            log.error("token_signing_failed", reason="secret_not_configured")
            raise InfrastructureError(
                "token signing secret is not configured", code="token_signing_failed"
            )

        claims = {
            "iss": email,
            "sub": kind.value,
            "exp": int((self._clock() + ttl).timestamp()),
        }
        try:
            return jwt.encode(claims, self._secret, algorithm=self._algorithm)
        except (jwt.PyJWTError, NotImplementedError, TypeError, ValueError) as e:
            log.error(
                "token_signing_failed",
                error=str(e),
                error_type=type(e).__name__,
            )
            raise InfrastructureError(
                "failed to sign token", code="token_signing_failed"
            ) from e

    def issue_pair(self, email: str) -> TokenPair:
        return TokenPair(
            access_token=self.issue(email, TokenKind.ACCESS, self._access_ttl),
            refresh_token=self.issue(email, TokenKind.REFRESH, self._refresh_ttl),
        )

    async def validate(self, token: str, require_access: bool) -> UserDoc:
        """Validate *token* and return the account it was issued to.

        *require_access* pins the expected kind: True accepts only access
        tokens, False only refresh tokens.

        Raises:
            AuthenticationError: bad signature or shape (``invalid_token``),
                wrong kind (``wrong_token_kind``) or unknown issuer
                (``user_not_signed_up``).
            ExpiredError: the token is past its expiry (``token_expired``).
        """
        try:
            claims = jwt.decode(
                token,
                self._secret,
                algorithms=[self._algorithm],
                # expiry is checked last, after the account lookup
                options={"verify_exp": False, "require": ["iss", "sub", "exp"]},
            )
        except jwt.PyJWTError as e:
            log.warning("token_rejected", reason="invalid", error=str(e))
            raise AuthenticationError("invalid token", code="invalid_token") from e

        try:
            expires_at = datetime.fromtimestamp(int(claims["exp"]), tz=timezone.utc)
        except (TypeError, ValueError, OverflowError, OSError) as e:
            log.warning("token_rejected", reason="invalid", error="bad exp claim")
            raise AuthenticationError("invalid token", code="invalid_token") from e

        subject = claims.get("sub")
        if require_access and subject != TokenKind.ACCESS.value:
            log.warning("token_rejected", reason="wrong_kind", expected="access")
            raise AuthenticationError(
                "invalid token (required type is access token)",
                code="wrong_token_kind",
            )
        if not require_access and subject == TokenKind.ACCESS.value:
            log.warning("token_rejected", reason="wrong_kind", expected="refresh")
            raise AuthenticationError(
                "invalid token (required type is refresh token)",
                code="wrong_token_kind",
            )

        user = await self._store.get_user(str(claims["iss"]))
        if user is None:
            log.warning("token_rejected", reason="unknown_user")
            raise AuthenticationError("user not signed up", code="user_not_signed_up")

        if self._clock() >= expires_at:
            log.info("token_rejected", reason="expired", email=user.email)
            raise ExpiredError("token expired", code="token_expired", status_code=401)

        return user
