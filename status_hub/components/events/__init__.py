"""
Inbound command handling.
"""

from status_hub.components.events.router import (
    CommandOutcome,
    CommandResult,
    CommandRouter,
    parse_message,
)

__all__ = [
    "CommandOutcome",
    "CommandResult",
    "CommandRouter",
    "parse_message",
]
