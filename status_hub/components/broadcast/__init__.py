"""
Periodic broadcast of hub snapshots.
"""

from status_hub.components.broadcast.scheduler import BroadcastScheduler

__all__ = ["BroadcastScheduler"]
