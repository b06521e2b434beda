"""
Connection bookkeeping: Connection handles and the ConnectionRegistry.
"""

from status_hub.components.connection.registry import (
    Connection,
    ConnectionRegistry,
    ConnectionState,
    is_ws_connected,
)

__all__ = [
    "Connection",
    "ConnectionRegistry",
    "ConnectionState",
    "is_ws_connected",
]
