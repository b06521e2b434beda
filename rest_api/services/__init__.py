"""
Domain logic behind the REST routers.
"""

from rest_api.services.catalog import (
    SAMPLE_DOCUMENTS,
    TEMPLATES,
    build_generated_document,
    estimate_pages,
    get_template,
    list_templates,
    new_document_id,
)

__all__ = [
    "SAMPLE_DOCUMENTS",
    "TEMPLATES",
    "build_generated_document",
    "estimate_pages",
    "get_template",
    "list_templates",
    "new_document_id",
]
