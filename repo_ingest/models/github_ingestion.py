"""
GitHub Ingestion Models

Pydantic models for the repository ingestion API requests and responses.
"""

from pydantic import BaseModel
from typing import List, Optional


class IngestionRequest(BaseModel):
    """Request model for GitHub repository ingestion.

    ``repo_url`` is optional at the schema level so that a missing value is
    reported with the ingestion error body instead of a schema error.
    """
    repo_url: Optional[str] = None
    branch: Optional[str] = None


class ErrorResponse(BaseModel):
    """Error body for 400 responses."""
    error: str


class NotFoundResponse(BaseModel):
    """Error body for 404 responses."""
    error: str
    message: str


class InternalErrorResponse(BaseModel):
    """Error body for 500 responses."""
    error: str
    details: str


class IngestionStatusResponse(BaseModel):
    """Response model for ingestion service status."""
    success: bool
    message: str
    default_branch: str
    ignore_patterns: List[str]
    ignore_match_mode: str
    allowed_extensions: List[str]
    max_files: int
    max_total_bytes: int
    max_archive_bytes: int
