"""
REST routers.
- /api/health, /api/metrics, /api/services, /health - Hub status
- /api/v1 - API index and docs
- /api/v1/documents - Mock document generation
- /api/v1/templates - Template catalog
"""

from .docs import router as docs_router
from .documents import router as documents_router
from .health import router as health_router
from .templates import router as templates_router

__all__ = ["docs_router", "documents_router", "health_router", "templates_router"]
