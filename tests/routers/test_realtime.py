from typing import Callable
from unittest.mock import AsyncMock, patch

import pytest
from fastapi import WebSocketDisconnect
from fastapi.testclient import TestClient

from shopfloor_chat.models.api.users import UserResponse

BOB = UserResponse(
    id=2,
    username="bob",
    email="bob@plant.example.com",
    role="OPERATOR",
    status="active",
)


class TestRealtimeChannel:
    def test_connection_without_token_is_closed_4401(self, client: TestClient) -> None:
        with pytest.raises(WebSocketDisconnect) as exc_info:
            with client.websocket_connect("/ws") as websocket:
                websocket.receive_json()

        assert exc_info.value.code == 4401

    def test_expired_token_is_closed_4401(
        self, client: TestClient, make_token: Callable[..., str]
    ) -> None:
        token = make_token(2, expires_in=-60)
        with pytest.raises(WebSocketDisconnect) as exc_info:
            with client.websocket_connect(f"/ws?token={token}") as websocket:
                websocket.receive_json()

        assert exc_info.value.code == 4401
        assert exc_info.value.reason == "Authentication token expired"

    def test_authenticated_connection_handles_events(self, client: TestClient) -> None:
        hub = client.app.state.hub
        with patch.object(
            hub, "authenticate", new_callable=AsyncMock, return_value=BOB
        ):
            with client.websocket_connect("/ws?token=anything") as websocket:
                websocket.send_json({"event": "join_conversations", "data": []})
                assert websocket.receive_json() == {
                    "event": "conversations_joined",
                    "data": [],
                }
                assert hub.is_user_online(BOB.id) is True

                websocket.send_text("not json")
                assert websocket.receive_json() == {
                    "event": "message_error",
                    "data": {"error": "Malformed frame: invalid JSON"},
                }

                websocket.send_bytes(b"\x00\x01")
                assert websocket.receive_json() == {
                    "event": "message_error",
                    "data": {"error": "Malformed frame: expected a text frame"},
                }
