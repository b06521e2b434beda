"""
FastAPI dependencies shared by the REST routers.

The hub and settings live on ``app.state`` (set by create_app()), so each
application instance serves its own hub.
"""

from typing import TYPE_CHECKING

from fastapi import Request

if TYPE_CHECKING:
    from shared.config.settings import Settings
    from status_hub.hub import StatusHub


def get_hub(request: Request) -> "StatusHub":
    """The StatusHub owned by the current application."""
    return request.app.state.hub


def get_app_settings(request: Request) -> "Settings":
    """Settings the current application was built with."""
    return request.app.state.settings
