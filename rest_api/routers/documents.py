"""
Mock document endpoints.

Generation only echoes its input after a fixed delay; listing and download
serve static sample data.
"""

import asyncio
import time

from fastapi import APIRouter, Depends
from fastapi.responses import Response

from rest_api.dependencies import get_app_settings
from rest_api.routers._common.pagination import Pagination, get_pagination
from rest_api.schemas import GenerateDocumentRequest, GeneratedDocument
from rest_api.services.catalog import SAMPLE_DOCUMENTS, build_generated_document
from shared.config.logging import rest_api_logger as logger
from shared.config.settings import Settings
from shared.utils.exceptions import ValidationError

router = APIRouter(prefix="/api/v1/documents", tags=["documents"])


@router.post("/generate", response_model=GeneratedDocument)
async def generate_document(
    body: GenerateDocumentRequest,
    settings: Settings = Depends(get_app_settings),
):
    """
    Generate a document from a template.

    Both ``template`` and ``content`` are required; the response arrives
    after ``document_generate_delay`` seconds of simulated processing.
    """
    if not body.template or not body.content:
        raise ValidationError(
            "Template and content are required",
            details={
                "template": "valid" if body.template else "required",
                "content": "valid" if body.content else "required",
            },
        )

    start_time = time.perf_counter()
    await asyncio.sleep(settings.document_generate_delay)
    document = build_generated_document(
        template=body.template,
        content=body.content,
        format=body.format,
        processing_seconds=time.perf_counter() - start_time,
    )

    logger.info(
        "Document generated",
        document_id=document["id"],
        template=body.template,
        format=body.format,
        content_length=len(body.content),
    )
    return document


@router.get("")
def list_documents(pagination: Pagination = Depends(get_pagination)):
    """Paged listing of sample documents."""
    return {
        "documents": pagination.slice(SAMPLE_DOCUMENTS),
        **pagination.to_dict(total=len(SAMPLE_DOCUMENTS)),
    }


@router.get("/{document_id}/download")
def download_document(document_id: str):
    """Mock PDF bytes for any document id."""
    return Response(
        content=f"Mock PDF content for document {document_id}".encode(),
        media_type="application/pdf",
        headers={"Content-Disposition": f'attachment; filename="document-{document_id}.pdf"'},
    )
