"""
Status Hub Constants.

Close codes, protocol message types and operational defaults.
"""

from enum import IntEnum
from typing import Final

__all__ = [
    "WSCloseCode",
    "HubConstants",
    "MessageType",
    "WS_ENDPOINT_PATH",
]


class WSCloseCode(IntEnum):
    """
    WebSocket close codes used by the hub.

    Standard codes (1000-1999) from RFC 6455.
    """

    NORMAL = 1000  # Normal closure
    GOING_AWAY = 1001  # Server shutting down
    POLICY_VIOLATION = 1008  # Generic policy violation
    SERVER_ERROR = 1011  # Unexpected server error


class MessageType:
    """Values of the ``type`` field in realtime protocol messages."""

    # Server -> client
    CONNECTION: Final[str] = "connection"
    METRICS_UPDATE: Final[str] = "metrics_update"
    PONG: Final[str] = "pong"
    SERVICES_UPDATE: Final[str] = "services_update"

    # Client -> server
    PING: Final[str] = "ping"
    GET_SERVICES: Final[str] = "get_services"


class HubConstants:
    """
    Status hub operational constants.

    Runtime values come from shared.config.settings; these are the defaults
    used where settings are not threaded through (tests, direct construction).
    """

    # DEFAULT_BROADCAST_INTERVAL: 30 seconds between metrics_update pushes
    DEFAULT_BROADCAST_INTERVAL: Final[float] = 30.0

    # DEFAULT_SEND_TIMEOUT: a single send slower than this counts as failed
    # and the connection is dropped from the registry.
    DEFAULT_SEND_TIMEOUT: Final[float] = 5.0

    # DEFAULT_CLOSE_TIMEOUT: bound on closing one transport during shutdown
    DEFAULT_CLOSE_TIMEOUT: Final[float] = 2.0

    # DEFAULT_PROBE_TIMEOUT: a probe still running after this maps to error
    DEFAULT_PROBE_TIMEOUT: Final[float] = 5.0

    # DEFAULT_BROADCAST_BATCH_SIZE: concurrent sends per broadcast batch
    DEFAULT_BROADCAST_BATCH_SIZE: Final[int] = 50

    # LOG_MESSAGE_PREVIEW: characters of an inbound frame kept in logs
    LOG_MESSAGE_PREVIEW: Final[int] = 100


WS_ENDPOINT_PATH: Final[str] = "/ws"
