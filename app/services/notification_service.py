"""
Notification service interface for sending push messages to users.

This module provides an abstract base class for push transports and an
Expo implementation that posts to the Expo push API over httpx.
"""

import logging
from abc import ABC, abstractmethod
from typing import Any, Dict, Optional

import httpx
from pydantic import BaseModel

from app.core.config import settings
from app.exceptions import NotificationDeliveryError

logger = logging.getLogger(__name__)


class PushMessage(BaseModel):
    """Content of a single push notification"""
    title: str
    body: str
    data: Dict[str, Any] = {}


class NotificationService(ABC):
    """Abstract base class for push transports"""

    @abstractmethod
    async def send_push(self, token: str, message: PushMessage) -> None:
        """Send one push message; raise NotificationDeliveryError if it was not accepted"""


class ExpoPushNotificationService(NotificationService):
    """Expo push API implementation"""

    def __init__(
        self,
        push_url: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self.push_url = push_url or settings.EXPO_PUSH_URL
        self.timeout = timeout or settings.PUSH_TIMEOUT_SECONDS
        self.transport = transport

    async def send_push(self, token: str, message: PushMessage) -> None:
        payload = {
            "to": token,
            "title": message.title,
            "body": message.body,
            "data": message.data,
            "sound": "default",
        }

        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
                response = await client.post(
                    self.push_url,
                    json=payload,
                    headers={"Accept": "application/json", "Content-Type": "application/json"},
                )
                response.raise_for_status()
                body = response.json()
        except httpx.HTTPError as e:
            raise NotificationDeliveryError(f"Push request failed: {e}", token=token) from e
        except ValueError as e:
            raise NotificationDeliveryError(f"Push response is not JSON: {e}", token=token) from e

        ticket = body.get("data") if isinstance(body, dict) else None
        if isinstance(ticket, list):
            ticket = ticket[0] if ticket else None
        if not isinstance(ticket, dict):
            raise NotificationDeliveryError("Push response has no ticket", token=token)

        if ticket.get("status") != "ok":
            raise NotificationDeliveryError(
                ticket.get("message", "Push rejected"), token=token, details=ticket.get("details")
            )

        logger.info("Push accepted by Expo: ticket %s", ticket.get("id"))


# Global instance
notification_service = ExpoPushNotificationService()
