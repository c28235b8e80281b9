"""
Tests for the Expo push transport
"""

import json

import httpx
import pytest

from app.exceptions import NotificationDeliveryError
from app.services.notification_service import ExpoPushNotificationService, PushMessage

PUSH_TOKEN = "ExponentPushToken[abc123]"
PUSH_URL = "https://push.test/--/api/v2/push/send"


def expo_service(status_code=200, content=b"", json_body=None, requests=None):
    def handler(request: httpx.Request) -> httpx.Response:
        if requests is not None:
            requests.append(request)
        if json_body is not None:
            return httpx.Response(status_code, json=json_body)
        return httpx.Response(status_code, content=content)

    return ExpoPushNotificationService(push_url=PUSH_URL, timeout=1.0, transport=httpx.MockTransport(handler))


class TestExpoPushNotificationService:
    """Test class for ExpoPushNotificationService"""

    @pytest.fixture
    def message(self):
        return PushMessage(title="Found: lamp! 🎉", body='"Moving sale" may have what you\'re looking for!', data={"matchId": "m1"})

    @pytest.mark.asyncio
    async def test_accepted_ticket(self, message):
        requests = []
        service = expo_service(json_body={"data": {"status": "ok", "id": "ticket-1"}}, requests=requests)

        await service.send_push(PUSH_TOKEN, message)

        sent = json.loads(requests[0].content)
        assert sent["to"] == PUSH_TOKEN
        assert sent["data"] == {"matchId": "m1"}

    @pytest.mark.asyncio
    async def test_ticket_list_is_accepted(self, message):
        service = expo_service(json_body={"data": [{"status": "ok", "id": "ticket-1"}]})

        await service.send_push(PUSH_TOKEN, message)

    @pytest.mark.asyncio
    async def test_rejected_ticket(self, message):
        service = expo_service(
            json_body={"data": {"status": "error", "message": "not registered", "details": {"error": "DeviceNotRegistered"}}}
        )

        with pytest.raises(NotificationDeliveryError) as exc_info:
            await service.send_push(PUSH_TOKEN, message)

        assert exc_info.value.details == {"error": "DeviceNotRegistered"}

    @pytest.mark.asyncio
    async def test_non_json_body_is_a_delivery_failure(self, message):
        service = expo_service(content=b"<html>gateway</html>")

        with pytest.raises(NotificationDeliveryError):
            await service.send_push(PUSH_TOKEN, message)

    @pytest.mark.asyncio
    async def test_unexpected_body_shape_is_a_delivery_failure(self, message):
        service = expo_service(json_body=["unexpected"])

        with pytest.raises(NotificationDeliveryError):
            await service.send_push(PUSH_TOKEN, message)

    @pytest.mark.asyncio
    async def test_empty_ticket_list_is_a_delivery_failure(self, message):
        service = expo_service(json_body={"data": []})

        with pytest.raises(NotificationDeliveryError):
            await service.send_push(PUSH_TOKEN, message)

    @pytest.mark.asyncio
    async def test_http_error(self, message):
        service = expo_service(status_code=503, content=b"unavailable")

        with pytest.raises(NotificationDeliveryError):
            await service.send_push(PUSH_TOKEN, message)
