from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Literal, Optional, Protocol

import httpx

from memberdues.core.config import settings
from memberdues.models.member import Member

logger = logging.getLogger(__name__)

DeliveryStatus = Literal["sent", "failed"]


@dataclass
class DeliveryResult:
    status: DeliveryStatus
    detail: Optional[str] = None


class NotificationGateway(Protocol):
    def send(self, member: Member, message: str) -> DeliveryResult:
        ...


class WhatsAppGateway:
    """Delivers text messages through a WhatsApp-compatible HTTP endpoint.

    Without provider credentials the message is only logged and reported as
    sent, so the notification log still records every request.
    """

    def __init__(
        self,
        api_url: Optional[str] = None,
        api_token: Optional[str] = None,
        timeout: Optional[float] = None,
    ) -> None:
        self.api_url = api_url if api_url is not None else settings.WHATSAPP_API_URL
        self.api_token = api_token if api_token is not None else settings.WHATSAPP_API_TOKEN
        self.timeout = timeout or settings.WHATSAPP_TIMEOUT_SECONDS

    def is_configured(self) -> bool:
        return bool(self.api_url and self.api_token)

    def send(self, member: Member, message: str) -> DeliveryResult:
        if not self.is_configured():
            logger.info(
                "whatsapp_send_stubbed",
                extra={"member_id": member.id, "phone": member.phone},
            )
            return DeliveryResult(status="sent")

        body = {
            "messaging_product": "whatsapp",
            "to": member.phone,
            "type": "text",
            "text": {"body": message},
        }
        headers = {"Authorization": f"Bearer {self.api_token}"}
        try:
            with httpx.Client(timeout=self.timeout) as client:
                resp = client.post(self.api_url, json=body, headers=headers)
        except httpx.HTTPError as exc:
            logger.warning(
                "whatsapp_request_failed",
                exc_info=True,
                extra={"member_id": member.id},
            )
            return DeliveryResult(status="failed", detail=str(exc))

        if resp.status_code >= 300:
            logger.warning(
                "whatsapp_non_2xx_response",
                extra={"member_id": member.id, "status_code": resp.status_code, "body": resp.text},
            )
            return DeliveryResult(status="failed", detail=f"HTTP {resp.status_code}")

        logger.info("whatsapp_sent", extra={"member_id": member.id})
        return DeliveryResult(status="sent")


def get_notification_gateway() -> NotificationGateway:
    return WhatsAppGateway()
