"""
Pydantic schemas for the document endpoints.
"""

from pydantic import BaseModel


class GenerateDocumentRequest(BaseModel):
    # Both fields are checked by the endpoint so a missing one yields the
    # VALIDATION_ERROR envelope with per-field details
    template: str | None = None
    content: str | None = None
    format: str = "pdf"


class DocumentMetadata(BaseModel):
    contentLength: int
    estimatedPages: int
    processingTime: str


class GeneratedDocument(BaseModel):
    id: str
    status: str
    template: str
    format: str
    downloadUrl: str
    createdAt: str
    metadata: DocumentMetadata
