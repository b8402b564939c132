"""
Outbound OTP email queue with a bounded worker pool.

Requests enqueue a notification and return immediately; a fixed number of
worker tasks deliver them through the configured EmailProvider. A delivery
that raises or reports failure is retried up to ``max_attempts`` times with
a linear backoff, then logged and counted as failed. A full queue drops the
notification (logged and counted) rather than blocking the request.

The app lifespan owns the pool: start() on startup, stop() on shutdown.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from typing import Optional

from infrastructure.email.protocol import EmailProvider
from schemas.models.otp import OtpPurpose
from shared.logging import get_logger

log = get_logger(__name__)


@dataclass(frozen=True)
class OtpNotification:
    email: str
    user_name: Optional[str]
    otp_code: int
    purpose: OtpPurpose


class NotificationQueue:
    def __init__(
        self,
        provider: EmailProvider,
        workers: int = 2,
        max_size: int = 1000,
        max_attempts: int = 3,
        retry_delay_seconds: float = 1.0,
    ) -> None:
        self._provider = provider
        self._worker_count = max(1, workers)
        self._max_attempts = max(1, max_attempts)
        self._retry_delay = retry_delay_seconds
        self._queue: asyncio.Queue[OtpNotification] = asyncio.Queue(maxsize=max_size)
        self._tasks: list[asyncio.Task] = []

        self.sent = 0
        self.failed = 0
        self.dropped = 0

    @property
    def running(self) -> bool:
        return bool(self._tasks)

    @property
    def pending(self) -> int:
        return self._queue.qsize()

    async def start(self) -> None:
        if self._tasks:
            return
        self._tasks = [
            asyncio.create_task(self._worker(i), name=f"otp-notifier-{i}")
            for i in range(self._worker_count)
        ]
        log.info("notification_workers_started", workers=self._worker_count)

    async def stop(self, drain_timeout: float = 5.0) -> None:
        """Wait up to *drain_timeout* seconds for queued jobs, then cancel workers."""
        if not self._tasks:
            return
        try:
            await asyncio.wait_for(self._queue.join(), timeout=drain_timeout)
        except asyncio.TimeoutError:
            log.warning("notification_drain_timeout", pending=self._queue.qsize())
        for task in self._tasks:
            task.cancel()
        await asyncio.gather(*self._tasks, return_exceptions=True)
        self._tasks = []
        log.info(
            "notification_workers_stopped",
            sent=self.sent,
            failed=self.failed,
            dropped=self.dropped,
        )

    def enqueue(self, notification: OtpNotification) -> bool:
        """Queue *notification* for delivery. Returns False if it was dropped."""
        try:
            self._queue.put_nowait(notification)
        except asyncio.QueueFull:
            self.dropped += 1
            log.warning(
                "notification_dropped",
                reason="queue_full",
                to_email=notification.email,
                purpose=notification.purpose.value,
            )
            return False
        return True

    async def join(self) -> None:
        """Block until every queued notification has been processed."""
        await self._queue.join()

    async def _worker(self, index: int) -> None:
        while True:
            notification = await self._queue.get()
            try:
                await self._deliver(notification)
            finally:
                self._queue.task_done()

    async def _send(self, notification: OtpNotification) -> bool:
        if notification.purpose is OtpPurpose.SIGNUP:
            return await self._provider.send_verification_email(
                notification.email, notification.user_name, notification.otp_code
            )
        return await self._provider.send_password_reset_email(
            notification.email, notification.user_name, notification.otp_code
        )

    async def _deliver(self, notification: OtpNotification) -> None:
        for attempt in range(1, self._max_attempts + 1):
            try:
                delivered = await self._send(notification)
            except Exception as e:
                log.warning(
                    "notification_attempt_error",
                    to_email=notification.email,
                    attempt=attempt,
                    error=str(e),
                    error_type=type(e).__name__,
                )
                delivered = False

            if delivered:
                self.sent += 1
                log.info(
                    "notification_delivered",
                    to_email=notification.email,
                    purpose=notification.purpose.value,
                    attempt=attempt,
                )
                return

            if attempt < self._max_attempts:
                await asyncio.sleep(self._retry_delay * attempt)

        self.failed += 1
        log.error(
            "notification_delivery_failed",
            to_email=notification.email,
            purpose=notification.purpose.value,
            attempts=self._max_attempts,
        )
