import logging

from fastapi import APIRouter, WebSocket, WebSocketDisconnect

from shopfloor_chat.errors import AuthenticationError

logger = logging.getLogger(__name__)

# Close code sent when the handshake credential is rejected
WS_CLOSE_UNAUTHORIZED = 4401

router = APIRouter()


@router.websocket("/ws")
async def realtime_channel(websocket: WebSocket) -> None:
    """Bidirectional event channel for chat, typing, receipts and notifications."""
    hub = websocket.app.state.hub

    try:
        user = await hub.authenticate(websocket)
    except AuthenticationError as e:
        logger.info("Rejected WebSocket connection: %s", e.message)
        await websocket.close(code=WS_CLOSE_UNAUTHORIZED, reason=e.message)
        return

    connection = await hub.connect(websocket, user)
    try:
        await hub.serve(connection)
    except WebSocketDisconnect as e:
        logger.debug("Connection %s closed with code %s", connection.id, e.code)
    finally:
        await hub.disconnect(connection)
