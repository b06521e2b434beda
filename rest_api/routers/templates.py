"""
Template catalog endpoints.
"""

from fastapi import APIRouter

from rest_api.services.catalog import get_template, list_templates
from shared.utils.exceptions import NotFoundError

router = APIRouter(prefix="/api/v1/templates", tags=["templates"])


@router.get("")
def get_templates():
    templates = list_templates()
    return {"templates": templates, "total": len(templates)}


@router.get("/{template_id}")
def get_template_detail(template_id: str):
    """Full template definition, or 404 NOT_FOUND."""
    template = get_template(template_id)
    if template is None:
        raise NotFoundError("Template", template_id)
    return template
