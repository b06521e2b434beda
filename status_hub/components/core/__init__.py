"""
Core components: constants, errors, log helpers.
"""

from status_hub.components.core.constants import (
    WSCloseCode,
    HubConstants,
    MessageType,
    WS_ENDPOINT_PATH,
)
from status_hub.components.core.context import sanitize_log_data
from status_hub.components.core.exceptions import (
    HubError,
    UnknownService,
    ProbeFailure,
    SendFailure,
    MalformedMessage,
)

__all__ = [
    "WSCloseCode",
    "HubConstants",
    "MessageType",
    "WS_ENDPOINT_PATH",
    "sanitize_log_data",
    "HubError",
    "UnknownService",
    "ProbeFailure",
    "SendFailure",
    "MalformedMessage",
]
