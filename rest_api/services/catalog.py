"""
Mock document catalog.

Static template definitions and sample documents. Nothing is persisted;
generated documents are echoed back and never stored.
"""

import math
import time
import uuid
from typing import Any

from status_hub.components.metrics.snapshot import utc_timestamp

CHARS_PER_PAGE = 500

TEMPLATES: dict[str, dict[str, Any]] = {
    "business-plan": {
        "id": "business-plan",
        "name": "Business Plan",
        "description": "Comprehensive business plan template with financial projections",
        "category": "business",
        "features": ["Executive Summary", "Market Analysis", "Financial Projections"],
        "structure": {
            "sections": [
                "Executive Summary",
                "Company Description",
                "Market Analysis",
                "Organization & Management",
                "Products & Services",
                "Marketing & Sales",
                "Financial Projections",
            ]
        },
        "variables": ["company_name", "industry", "target_market", "funding_amount"],
    },
    "proposal": {
        "id": "proposal",
        "name": "Project Proposal",
        "description": "Professional project proposal template",
        "category": "project",
        "features": ["Project Scope", "Timeline", "Budget"],
        "structure": {
            "sections": ["Overview", "Project Scope", "Timeline", "Budget", "Team"]
        },
        "variables": ["project_name", "client", "start_date", "budget"],
    },
    "report": {
        "id": "report",
        "name": "Technical Report",
        "description": "Technical documentation and reporting template",
        "category": "technical",
        "features": ["Abstract", "Methodology", "Results"],
        "structure": {
            "sections": ["Abstract", "Introduction", "Methodology", "Results", "Conclusion"]
        },
        "variables": ["title", "authors", "subject"],
    },
}

_SUMMARY_FIELDS = ("id", "name", "description", "category", "features")

SAMPLE_DOCUMENTS: list[dict[str, Any]] = [
    {
        "id": "doc_sample_1",
        "title": "Business Plan Draft",
        "status": "completed",
        "template": "business-plan",
        "createdAt": "2024-01-01T10:00:00Z",
        "size": "245 KB",
    },
    {
        "id": "doc_sample_2",
        "title": "Project Proposal",
        "status": "completed",
        "template": "proposal",
        "createdAt": "2024-01-01T09:30:00Z",
        "size": "156 KB",
    },
]


def list_templates() -> list[dict[str, Any]]:
    """Summary view of every template."""
    return [{key: template[key] for key in _SUMMARY_FIELDS} for template in TEMPLATES.values()]


def get_template(template_id: str) -> dict[str, Any] | None:
    return TEMPLATES.get(template_id)


def estimate_pages(content: str) -> int:
    return math.ceil(len(content) / CHARS_PER_PAGE)


def new_document_id() -> str:
    """``doc_<epoch ms>_<random>``"""
    return f"doc_{int(time.time() * 1000)}_{uuid.uuid4().hex[:9]}"


def build_generated_document(
    template: str,
    content: str,
    format: str,
    processing_seconds: float,
) -> dict[str, Any]:
    """Response body for a completed mock generation."""
    document_id = new_document_id()
    return {
        "id": document_id,
        "status": "completed",
        "template": template,
        "format": format,
        "downloadUrl": f"/api/v1/documents/{document_id}/download",
        "createdAt": utc_timestamp(),
        "metadata": {
            "contentLength": len(content),
            "estimatedPages": estimate_pages(content),
            "processingTime": f"{processing_seconds:.1f}s",
        },
    }
