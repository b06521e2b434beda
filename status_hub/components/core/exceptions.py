"""
Status hub error taxonomy.

Only UnknownService reaches callers. The other errors describe failures
local to one probe, one send or one inbound frame; they are raised and
caught inside the hub and turned into state transitions (status ``error``,
connection removal, dropped message).
"""

from __future__ import annotations


class HubError(Exception):
    """Base class for status hub errors."""


class UnknownService(HubError, KeyError):
    """Status lookup or update for a service that was never configured."""

    def __init__(self, name: str) -> None:
        super().__init__(name)
        self.name = name

    def __str__(self) -> str:
        return f"Unknown service: {self.name!r}"


class ProbeFailure(HubError):
    """A startup probe raised or timed out."""

    def __init__(self, service: str, cause: BaseException | None = None) -> None:
        reason = type(cause).__name__ if cause is not None else "unknown"
        super().__init__(f"Probe for {service!r} failed: {reason}")
        self.service = service
        self.cause = cause


class SendFailure(HubError):
    """Delivering a message to one connection failed."""

    def __init__(self, connection_id: str, cause: BaseException | None = None) -> None:
        super().__init__(f"Send to connection {connection_id} failed")
        self.connection_id = connection_id
        self.cause = cause


class MalformedMessage(HubError):
    """Inbound frame is not a JSON object with a string ``type`` field."""
