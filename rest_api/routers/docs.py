"""
API index and self-description.
"""

from fastapi import APIRouter, Depends, Request

from rest_api.dependencies import get_app_settings
from shared.config.settings import Settings

router = APIRouter(prefix="/api/v1", tags=["docs"])

API_TITLE = "Document Generator API V2"

ENDPOINTS = {
    "GET /health": "Health check",
    "GET /api/v1": "API information",
    "POST /api/v1/documents/generate": "Generate document from template",
    "GET /api/v1/documents": "List documents",
    "GET /api/v1/documents/{id}/download": "Download document",
    "GET /api/v1/templates": "List templates",
    "GET /api/v1/templates/{id}": "Get template details",
}


@router.get("")
def api_index(settings: Settings = Depends(get_app_settings)):
    return {
        "message": API_TITLE,
        "version": settings.app_version,
        "endpoints": {
            "health": "/health",
            "generate": "/api/v1/documents/generate",
            "documents": "/api/v1/documents",
            "templates": "/api/v1/templates",
            "docs": "/api/v1/docs",
        },
    }


@router.get("/docs")
def api_docs(request: Request, settings: Settings = Depends(get_app_settings)):
    """Endpoint catalog with a request example."""
    return {
        "title": API_TITLE,
        "version": settings.app_version,
        "description": "RESTful API for document generation",
        "baseUrl": f"{str(request.base_url).rstrip('/')}/api/v1",
        "endpoints": ENDPOINTS,
        "examples": {
            "generate": {
                "method": "POST",
                "url": "/api/v1/documents/generate",
                "body": {
                    "template": "business-plan",
                    "content": "My startup idea description...",
                    "format": "pdf",
                },
            }
        },
    }
