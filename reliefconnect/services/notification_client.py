# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
Service: Notification client for outbound calls to the notification service.
Fire-and-forget: failures are logged, never raised.
"""

import httpx

from reliefconnect.core.config import settings
from reliefconnect.core.logging import get_logger
from reliefconnect.metrics import NOTIFICATIONS_SENT

logger = get_logger(__name__)


class NotificationClient:
    """Send volunteer-facing notices via the notification service."""

    def __init__(self, base_url: str | None = None, timeout: float | None = None) -> None:
        self._base_url = settings.NOTIFICATION_SERVICE_URL if base_url is None else base_url
        self._timeout = timeout or settings.NOTIFICATION_TIMEOUT

    @property
    def enabled(self) -> bool:
        return bool(self._base_url)

    def send(
        self,
        channel: str,
        recipient: str,
        message: str,
        reference: str = "N/A",
    ) -> bool:
        """Send one notification; returns whether it was delivered."""
        if not self.enabled:
            logger.debug("Notifications disabled, dropping message for %s", recipient)
            return False
        try:
            with httpx.Client(timeout=self._timeout) as client:
                resp = client.post(
                    f"{self._base_url}/api/v1/notify",
                    json={
                        "channel": channel,
                        "recipient": recipient,
                        "message": message,
                        "incident_id": reference,
                    },
                )
                resp.raise_for_status()
            NOTIFICATIONS_SENT.labels(channel=channel, outcome="sent").inc()
            logger.info(
                "Notification sent: recipient=%s, channel=%s, status=%d",
                recipient, channel, resp.status_code,
            )
            return True
        except httpx.HTTPError as exc:
            NOTIFICATIONS_SENT.labels(channel=channel, outcome="failed").inc()
            logger.warning("Notification failed: %s", exc)
            return False
