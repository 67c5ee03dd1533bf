from datetime import datetime, timezone
from unittest.mock import AsyncMock, patch

import pytest
from fastapi.testclient import TestClient

from shopfloor_chat.dependencies import get_current_user
from shopfloor_chat.main import app
from shopfloor_chat.models.api.notifications import NotificationResponse, NotificationType
from shopfloor_chat.models.api.users import UserResponse

CURRENT_USER = UserResponse(
    id=3,
    username="carol",
    email="carol@plant.example.com",
    role="OPERATOR",
    status="active",
)


def make_notification(notification_id: int, **overrides: object) -> NotificationResponse:
    fields = dict(
        id=notification_id,
        user_id=3,
        type=NotificationType.NEW_MESSAGE,
        title="New message from alice",
        content="Line 3 is down",
        data={"conversationId": 1, "messageId": 7, "senderId": 1},
        is_read=False,
        created_at=datetime.now(timezone.utc),
    )
    fields.update(overrides)
    return NotificationResponse(**fields)


class TestNotificationsRouter:
    @pytest.fixture
    def authed_client(self, client: TestClient) -> TestClient:
        app.dependency_overrides[get_current_user] = lambda: CURRENT_USER
        return client

    def test_notifications_require_authentication(self, client: TestClient) -> None:
        assert client.get("/api/chat/notifications").status_code == 401

    def test_list_notifications(self, authed_client: TestClient) -> None:
        with patch(
            "shopfloor_chat.services.list_notifications_service"
            ".ListNotificationsService.list_notifications",
            new_callable=AsyncMock,
            return_value=[make_notification(1)],
        ) as mock_list:
            response = authed_client.get(
                "/api/chat/notifications?limit=10&unreadOnly=true"
            )

        assert response.status_code == 200
        [notification] = response.json()
        assert notification["isRead"] is False
        assert notification["data"]["messageId"] == 7
        mock_list.assert_called_once_with(3, limit=10, offset=0, unread_only=True)

    def test_mark_selected_notifications_read(self, authed_client: TestClient) -> None:
        with patch(
            "shopfloor_chat.services.list_notifications_service"
            ".ListNotificationsService.mark_read",
            new_callable=AsyncMock,
            return_value=2,
        ) as mock_mark:
            response = authed_client.put(
                "/api/chat/notifications/read", json={"notificationIds": [4, 5]}
            )

        assert response.status_code == 200
        assert response.json() == {"updated": 2}
        mock_mark.assert_called_once_with(3, [4, 5])

    def test_mark_all_notifications_read(self, authed_client: TestClient) -> None:
        with patch(
            "shopfloor_chat.services.list_notifications_service"
            ".ListNotificationsService.mark_read",
            new_callable=AsyncMock,
            return_value=9,
        ) as mock_mark:
            response = authed_client.put("/api/chat/notifications/read", json={})

        assert response.status_code == 200
        mock_mark.assert_called_once_with(3, None)

    def test_test_notification_goes_through_the_hub(
        self, authed_client: TestClient
    ) -> None:
        hub = authed_client.app.state.hub
        created = make_notification(
            8,
            type=NotificationType.SYSTEM,
            title="Test notification",
            content="This is a test notification",
            data={"test": True},
        )
        with patch.object(
            hub, "create_notification", new_callable=AsyncMock, return_value=created
        ) as mock_create:
            response = authed_client.post("/api/chat/notifications/test")

        assert response.status_code == 201
        assert response.json()["type"] == "SYSTEM"
        user_id, notification = mock_create.call_args.args
        assert user_id == 3
        assert notification.type == NotificationType.SYSTEM

    def test_unread_count(self, authed_client: TestClient) -> None:
        with patch(
            "shopfloor_chat.services.list_notifications_service"
            ".ListNotificationsService.count_unread",
            new_callable=AsyncMock,
            return_value=4,
        ) as mock_count:
            response = authed_client.get("/api/chat/notifications/unread-count")

        assert response.status_code == 200
        assert response.json() == {"count": 4}
        mock_count.assert_called_once_with(3)

    def test_unread_count_requires_authentication(self, client: TestClient) -> None:
        assert client.get("/api/chat/notifications/unread-count").status_code == 401
