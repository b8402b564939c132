"""ZeptoMail implementation of EmailProvider.

Sends OTP emails through the ZeptoMail HTTP API using the shared async
HttpClient. HTML bodies are rendered from Jinja2 templates under
templates/emails/.
"""

import os
from dataclasses import dataclass
from typing import Optional

from jinja2 import Environment, FileSystemLoader, select_autoescape

from config import EmailSettings
from infrastructure.http_client import HttpClient
from shared.logging import get_logger

log = get_logger(__name__)

_ZEPTO_API_URL = "https://api.zeptomail.in/v1.1/email"
_TOKEN_PREFIX = "Zoho-enczapikey "
_ACCEPTED_STATUSES = (200, 201, 202)
_DEFAULT_TEMPLATE_DIR = os.path.join(
    os.path.dirname(os.path.dirname(os.path.dirname(__file__))),
    "templates",
    "emails",
)


@dataclass(frozen=True)
class _OtpMessage:
    subject: str
    html: str
    text: str


class ZeptoMailProvider:
    def __init__(
        self,
        settings: EmailSettings,
        http_client: HttpClient,
        app_name: str = "auth-backend",
        otp_ttl_seconds: int = 300,
        template_dir: str = _DEFAULT_TEMPLATE_DIR,
    ) -> None:
        self._settings = settings
        self._http = http_client
        self._app_name = app_name
        self._expires_in_minutes = max(1, otp_ttl_seconds // 60)
        self._jinja = Environment(
            loader=FileSystemLoader(template_dir),
            autoescape=select_autoescape(["html", "xml"]),
        )

    def _auth_header(self) -> str:
        token = self._settings.zepto_api_token
        if token.startswith(_TOKEN_PREFIX):
            return token
        return _TOKEN_PREFIX + token

    def _payload(
        self, to_email: str, to_name: Optional[str], message: _OtpMessage
    ) -> dict:
        sender = {
            "address": self._settings.zepto_from_email,
            "name": self._settings.zepto_from_name,
        }
        recipient = {"address": to_email, "name": to_name or to_email}
        return {
            "from": sender,
            "to": [{"email_address": recipient}],
            "subject": message.subject,
            "htmlbody": message.html,
            "textbody": message.text,
        }

    async def _send(
        self, to_email: str, to_name: Optional[str], message: _OtpMessage
    ) -> bool:
        """POST one message; any failure is logged and reported as False."""
        if not self._settings.zepto_api_token:
            log.error("otp_email_failed", reason="token_not_configured")
            return False

        try:
            response = await self._http.post(
                _ZEPTO_API_URL,
                json=self._payload(to_email, to_name, message),
                headers={
                    "Authorization": self._auth_header(),
                    "Content-Type": "application/json",
                },
            )
        except Exception as e:
            log.error(
                "otp_email_failed",
                to_email=to_email,
                reason="request_error",
                error=str(e),
                error_type=type(e).__name__,
            )
            return False

        if response.status_code not in _ACCEPTED_STATUSES:
            log.error(
                "otp_email_failed",
                to_email=to_email,
                reason="rejected",
                status_code=response.status_code,
                response=response.text[:200],
            )
            return False

        log.info("otp_email_sent", to_email=to_email, subject=message.subject)
        return True

    def _compose(
        self,
        template_name: str,
        subject: str,
        label: str,
        user_name: Optional[str],
        otp_code: int,
    ) -> _OtpMessage:
        html = self._jinja.get_template(template_name).render(
            otp_code=otp_code,
            user_name=user_name,
            app_name=self._app_name,
            expires_in_minutes=self._expires_in_minutes,
        )
        greeting = f"Hello {user_name}," if user_name else "Hello,"
        text = "\n\n".join(
            [
                f"{subject} - {self._app_name}",
                greeting,
                f"Your {label} is: {otp_code}",
                f"This code expires in {self._expires_in_minutes} minutes.",
            ]
        )
        return _OtpMessage(subject=f"{subject} - {self._app_name}", html=html, text=text)

    async def send_verification_email(
        self, email: str, user_name: Optional[str], otp_code: int
    ) -> bool:
        message = self._compose(
            "verification.html",
            "Verify your account",
            "verification code",
            user_name,
            otp_code,
        )
        return await self._send(email, user_name, message)

    async def send_password_reset_email(
        self, email: str, user_name: Optional[str], otp_code: int
    ) -> bool:
        message = self._compose(
            "password_reset.html",
            "Reset your password",
            "password reset code",
            user_name,
            otp_code,
        )
        return await self._send(email, user_name, message)
