"""
Health, metrics and service status endpoints backed by the StatusHub.
"""

from fastapi import APIRouter, Depends

from rest_api.dependencies import get_app_settings, get_hub
from shared.config.settings import Settings
from status_hub.components.metrics.snapshot import utc_timestamp
from status_hub.hub import StatusHub

router = APIRouter(tags=["health"])


@router.get("/api/health")
def api_health(hub: StatusHub = Depends(get_hub)):
    """
    Hub health with the current service table.
    ``uptime`` is in milliseconds.
    """
    return {
        "status": "healthy",
        "uptime": int(hub.uptime() * 1000),
        "services": hub.table.as_status_map(),
        "timestamp": utc_timestamp(),
    }


@router.get("/api/metrics")
def api_metrics(hub: StatusHub = Depends(get_hub)):
    """Live hub metrics plus the collector counters."""
    snapshot = hub.build_snapshot()
    return {
        "success": True,
        "data": {
            "uptime": snapshot.uptime_seconds,
            "activeConnections": snapshot.active_connections,
            "lastUpdate": snapshot.timestamp,
            "hub": hub.metrics.get_snapshot_sync(),
        },
    }


@router.get("/api/services")
def api_services(hub: StatusHub = Depends(get_hub)):
    """Service table with healthy/total counts."""
    return {
        "services": hub.table.as_status_map(),
        "healthy": hub.table.healthy_count(),
        "total": len(hub.table),
    }


@router.get("/health")
def health_check(
    hub: StatusHub = Depends(get_hub),
    settings: Settings = Depends(get_app_settings),
):
    """
    Basic health check endpoint.
    Returns service status without checking dependencies.
    """
    return {
        "status": "healthy",
        "timestamp": utc_timestamp(),
        "version": settings.app_version,
        "uptime": round(hub.uptime(), 3),
    }
