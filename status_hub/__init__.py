"""
Realtime status hub.

Tracks backend service liveness, keeps a registry of WebSocket clients and
pushes periodic status snapshots to them.
"""
