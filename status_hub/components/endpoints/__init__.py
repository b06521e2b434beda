"""
WebSocket endpoint handlers.
"""

from status_hub.components.endpoints.base import HubEndpoint

__all__ = ["HubEndpoint"]
