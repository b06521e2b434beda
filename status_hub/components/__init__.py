"""
Status Hub Components.

Organized into domain-specific modules:
- core/       - Foundational components (constants, errors, log helpers)
- connection/ - Connection handles and the registry
- health/     - Service table and startup probes
- metrics/    - Counters and snapshots
- broadcast/  - Periodic metrics_update scheduler
- events/     - Inbound command router
- endpoints/  - WebSocket endpoint loop

Import from the specific submodules; this package re-exports nothing.
"""
