import json
import logging
from typing import TYPE_CHECKING, Any, Awaitable, Callable, Dict

from pydantic import ValidationError
from sqlalchemy.exc import SQLAlchemyError

from shopfloor_chat.errors import ChatError, MalformedRequestError
from shopfloor_chat.models.api import events
from shopfloor_chat.models.api.events import (
    JoinConversationsPayload,
    MarkMessagesReadPayload,
    MessageErrorEvent,
    SendMessagePayload,
    TypingEvent,
    TypingPayload,
)
from shopfloor_chat.realtime.broadcast import conversation_group
from shopfloor_chat.realtime.connection import Connection
from shopfloor_chat.services.mark_messages_read_service import (
    MarkMessagesReadService,
)
from shopfloor_chat.services.send_message_service import SendMessageService

if TYPE_CHECKING:
    from shopfloor_chat.realtime.hub import RealtimeHub

logger = logging.getLogger(__name__)

Handler = Callable[[Connection, Any], Awaitable[None]]

# Client-facing text for storage failures, per event
_FAILURE_MESSAGES = {
    events.JOIN_CONVERSATIONS: "Failed to join conversations",
    events.SEND_MESSAGE: "Failed to send message",
    events.MARK_MESSAGES_READ: "Failed to mark messages as read",
}


class EventDispatcher:
    """Routes each incoming frame of a connection to the matching component.

    Errors are reported to the originating connection only, as a
    ``message_error`` event; the connection stays open.
    """

    def __init__(self, hub: "RealtimeHub"):
        self.hub = hub
        self._handlers: Dict[str, Handler] = {
            events.JOIN_CONVERSATIONS: self._join_conversations,
            events.SEND_MESSAGE: self._send_message,
            events.TYPING_START: self._typing_start,
            events.TYPING_STOP: self._typing_stop,
            events.MARK_MESSAGES_READ: self._mark_messages_read,
        }

    async def dispatch_message(
        self, connection: Connection, message: Dict[str, Any]
    ) -> None:
        """Handle one raw ASGI receive message."""
        text = message.get("text")
        if text is None:
            await self._report(connection, "Malformed frame: expected a text frame")
            return
        await self.dispatch_text(connection, text)

    async def dispatch_text(self, connection: Connection, text: str) -> None:
        try:
            frame = json.loads(text)
        except ValueError:
            await self._report(connection, "Malformed frame: invalid JSON")
            return
        await self.dispatch(connection, frame)

    async def dispatch(self, connection: Connection, frame: Any) -> None:
        if not isinstance(frame, dict) or not isinstance(frame.get("event"), str):
            await self._report(connection, "Malformed frame: missing event name")
            return

        event = frame["event"]
        handler = self._handlers.get(event)
        if handler is None:
            await self._report(connection, f"Unknown event: {event}")
            return

        try:
            await handler(connection, frame.get("data"))
        except ValidationError as e:
            logger.debug("Invalid %s payload from %s: %s", event, connection, e)
            await self._report(
                connection, MalformedRequestError(f"Invalid {event} payload").message
            )
        except ChatError as e:
            await self._report(connection, e.message)
        except (SQLAlchemyError, OSError):
            logger.exception("Storage error while handling %s for %s", event, connection)
            await self._report(
                connection, _FAILURE_MESSAGES.get(event, f"Failed to handle {event}")
            )

    async def _join_conversations(self, connection: Connection, data: Any) -> None:
        conversation_ids = JoinConversationsPayload.validate_python(data)
        async with self.hub.session_factory() as db:
            joined = await self.hub.rooms.join_rooms(connection, conversation_ids, db)
        await connection.send(events.CONVERSATIONS_JOINED, joined)

    async def _send_message(self, connection: Connection, data: Any) -> None:
        payload = SendMessagePayload.model_validate(data)
        async with self.hub.session_factory() as db:
            service = SendMessageService(
                db, self.hub.groups, notify=self.hub.spawn_notification
            )
            await service.send_message(connection.user, payload)

    async def _typing_start(self, connection: Connection, data: Any) -> None:
        await self._relay_typing(connection, data, events.USER_TYPING)

    async def _typing_stop(self, connection: Connection, data: Any) -> None:
        await self._relay_typing(connection, data, events.USER_STOPPED_TYPING)

    async def _relay_typing(self, connection: Connection, data: Any, event: str) -> None:
        payload = TypingPayload.model_validate(data)
        group = conversation_group(payload.conversation_id)
        # Only relay into rooms this connection was authorized to join
        if group not in connection.groups:
            return
        await self.hub.groups.publish(
            group,
            event,
            TypingEvent(
                user_id=connection.user_id,
                username=connection.user.username,
                conversation_id=payload.conversation_id,
            ),
            exclude=connection,
        )

    async def _mark_messages_read(self, connection: Connection, data: Any) -> None:
        payload = MarkMessagesReadPayload.model_validate(data)
        async with self.hub.session_factory() as db:
            service = MarkMessagesReadService(db, self.hub.groups)
            await service.mark_read(connection.user_id, payload, exclude=connection)

    async def _report(self, connection: Connection, error: str) -> None:
        await connection.send(events.MESSAGE_ERROR, MessageErrorEvent(error=error))
