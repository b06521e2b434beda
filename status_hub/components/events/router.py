"""
Command Router - interprets inbound client messages.

Closed set of commands:
- {"type": "ping"}         -> {"type": "pong"}
- {"type": "get_services"} -> {"type": "services_update", "data": {...}}

Anything else (unknown type, non-JSON, JSON that is not an object with a
string ``type``) gets no reply and leaves the connection open.

Usage:
    router = CommandRouter(table)
    result = router.route(connection, raw_text)
    if result.reply is not None:
        await registry.send(connection, result.reply)
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Protocol, TYPE_CHECKING

from shared.config.logging import get_logger
from status_hub.components.core.constants import MessageType
from status_hub.components.core.context import sanitize_log_data
from status_hub.components.core.exceptions import MalformedMessage

if TYPE_CHECKING:
    from status_hub.components.connection.registry import Connection

logger = get_logger(__name__)


class ServiceTableReader(Protocol):
    """Read-only view of the service table used by the router."""

    def as_status_map(self) -> dict[str, str]: ...


class CommandOutcome(str, Enum):
    """How an inbound message was handled."""

    REPLY = "reply"
    UNKNOWN = "unknown"
    MALFORMED = "malformed"


@dataclass(frozen=True)
class CommandResult:
    """Result of routing one inbound message."""

    outcome: CommandOutcome
    reply: dict[str, Any] | None = None
    message_type: str | None = None


def parse_message(raw: str | bytes) -> dict[str, Any]:
    """
    Decode one inbound frame.

    Raises:
        MalformedMessage: not JSON, not an object, or ``type`` missing / not a string.
    """
    try:
        message = json.loads(raw)
    except (TypeError, ValueError, RecursionError) as e:
        raise MalformedMessage("payload is not valid JSON") from e

    if not isinstance(message, dict):
        raise MalformedMessage("payload is not a JSON object")

    message_type = message.get("type")
    if not isinstance(message_type, str):
        raise MalformedMessage("payload has no string 'type' field")

    return message


class CommandRouter:
    """
    Stateless dispatcher for messages from a single connection.

    Reads the service table, never mutates it, and never touches the
    connection registry; delivering the reply is the caller's job.
    """

    def __init__(self, table: ServiceTableReader) -> None:
        self._table = table
        self._handlers: dict[str, Callable[["Connection", dict[str, Any]], dict[str, Any]]] = {
            MessageType.PING: self._handle_ping,
            MessageType.GET_SERVICES: self._handle_get_services,
        }

    @property
    def commands(self) -> frozenset[str]:
        """Message types this router answers."""
        return frozenset(self._handlers)

    def route(self, connection: "Connection", raw: str | bytes) -> CommandResult:
        """Parse and dispatch one raw frame."""
        try:
            message = parse_message(raw)
        except MalformedMessage as e:
            logger.debug(
                "Dropping malformed message",
                connection_id=connection.id,
                reason=str(e),
                message=sanitize_log_data(raw),
            )
            return CommandResult(CommandOutcome.MALFORMED)

        return self.dispatch(connection, message)

    def dispatch(self, connection: "Connection", message: dict[str, Any]) -> CommandResult:
        """Dispatch an already-parsed message."""
        message_type = message["type"]
        handler = self._handlers.get(message_type)
        if handler is None:
            logger.info(
                "Unknown WebSocket message",
                connection_id=connection.id,
                message_type=sanitize_log_data(message_type),
            )
            return CommandResult(CommandOutcome.UNKNOWN, message_type=message_type)

        return CommandResult(
            CommandOutcome.REPLY,
            reply=handler(connection, message),
            message_type=message_type,
        )

    def _handle_ping(self, connection: "Connection", message: dict[str, Any]) -> dict[str, Any]:
        return {"type": MessageType.PONG}

    def _handle_get_services(self, connection: "Connection", message: dict[str, Any]) -> dict[str, Any]:
        return {
            "type": MessageType.SERVICES_UPDATE,
            "data": self._table.as_status_map(),
        }
