"""
GitHub Ingestion Router

API endpoints for turning GitHub repositories into document lists.
"""

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from typing import Optional
import logging

from repo_ingest.errors import IngestionError, InternalError
from repo_ingest.models.github_ingestion import (
    ErrorResponse,
    IngestionRequest,
    IngestionStatusResponse,
    InternalErrorResponse,
    NotFoundResponse,
)
from repo_ingest.models.schemas import IngestionResult
from repo_ingest.services.github_ingestion_service import (
    GitHubIngestionService,
    get_ingestion_service,
)

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post(
    "/ingest",
    response_model=IngestionResult,
    responses={
        400: {"model": ErrorResponse},
        404: {"model": NotFoundResponse},
        500: {"model": InternalErrorResponse},
    },
)
async def ingest_github_repository(
    request: Optional[IngestionRequest] = None,
    service: GitHubIngestionService = Depends(get_ingestion_service),
):
    """
    Download a GitHub branch snapshot and return its source files as documents.

    Args:
        request: IngestionRequest containing repo_url and optional branch

    Returns:
        IngestionResult with the accepted documents in archive order
    """
    request = request or IngestionRequest()
    logger.info(f"[ROUTER] Received ingestion request for {request.repo_url} (branch: {request.branch})")
    try:
        result = await service.ingest_repository(request.repo_url, request.branch)
    except InternalError as e:
        logger.error(f"[ROUTER] Ingestion failed for {request.repo_url}: {e}", exc_info=e)
        return JSONResponse(status_code=e.status_code, content=e.to_response())
    except IngestionError as e:
        logger.warning(f"[ROUTER] Ingestion rejected for {request.repo_url}: {e}")
        return JSONResponse(status_code=e.status_code, content=e.to_response())
    except Exception as e:
        logger.exception(f"[ROUTER] Unexpected error during ingestion of {request.repo_url}: {e}")
        return JSONResponse(status_code=500, content=InternalError(str(e)).to_response())

    logger.info(f"[ROUTER] Ingestion completed for {result.repo}@{result.branch}: {result.file_count} files")
    return result


@router.get("/ingest/status", response_model=IngestionStatusResponse)
async def get_ingestion_status(
    service: GitHubIngestionService = Depends(get_ingestion_service),
):
    """
    Get the status of the ingestion service.

    Returns:
        The effective ingestion configuration
    """
    settings = service.settings
    return IngestionStatusResponse(
        success=True,
        message="GitHub ZIP ingestion service is running",
        default_branch=settings.default_branch,
        ignore_patterns=list(settings.ignore_patterns),
        ignore_match_mode=settings.ignore_match_mode,
        allowed_extensions=list(settings.allowed_extensions),
        max_files=settings.max_files,
        max_total_bytes=settings.max_total_bytes,
        max_archive_bytes=settings.max_archive_bytes,
    )
