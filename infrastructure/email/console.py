"""Logging implementation of EmailProvider.

Selected when no ZeptoMail token is configured: the code is written to the
application log instead of being mailed, which is enough for local
development.
"""

from typing import Optional

from shared.logging import get_logger

log = get_logger(__name__)


class ConsoleEmailProvider:
    async def send_verification_email(
        self, email: str, user_name: Optional[str], otp_code: int
    ) -> bool:
        log.info("otp_email_logged", to_email=email, purpose="signup", otp_code=otp_code)
        return True

    async def send_password_reset_email(
        self, email: str, user_name: Optional[str], otp_code: int
    ) -> bool:
        log.info(
            "otp_email_logged",
            to_email=email,
            purpose="reset_password",
            otp_code=otp_code,
        )
        return True
