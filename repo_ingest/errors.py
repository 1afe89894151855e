"""
Ingestion Errors

Closed set of failures the ingestion pipeline can report. Each error knows
its HTTP status and the JSON body returned to the caller; the text of any
underlying exception stays in the server log.
"""

from typing import Any, Dict, Optional


class IngestionError(Exception):
    """Base class for every failure reported by the ingestion pipeline."""

    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def to_response(self) -> Dict[str, Any]:
        return {"error": self.message}


class InvalidRequestError(IngestionError):
    """Missing or malformed caller input."""

    status_code = 400


class NotFoundError(IngestionError):
    """Repository or branch could not be reached."""

    status_code = 404


class ArchiveDownloadError(NotFoundError):
    """
    The branch snapshot could not be downloaded.

    ``reason`` names the underlying cause: ``not_found``, ``http_status``,
    ``timeout``, ``too_many_redirects`` or ``connection``. All causes share
    the same response body.
    """

    def __init__(self, repo: str, branch: str, reason: str,
                 http_status: Optional[int] = None):
        super().__init__(f"Could not download {repo}@{branch} ({reason})")
        self.repo = repo
        self.branch = branch
        self.reason = reason
        self.http_status = http_status

    def to_response(self) -> Dict[str, Any]:
        return {
            "error": "Could not download repository ZIP",
            "message": f"Branch '{self.branch}' not found or inaccessible",
        }


class InternalError(IngestionError):
    """Failure on our side of the pipeline."""

    status_code = 500
    details = "Unexpected error while ingesting repository"

    def to_response(self) -> Dict[str, Any]:
        return {"error": "Internal server error", "details": self.details}


class CorruptArchiveError(InternalError):
    details = "Downloaded repository archive is not a valid ZIP file"


class ArchiveTooLargeError(InternalError):
    details = "Repository archive exceeds the configured size limit"

    def __init__(self, repo: str, size: int, limit: int):
        super().__init__(f"Archive for {repo} is {size} bytes, limit is {limit}")
        self.size = size
        self.limit = limit


class DeadlineExceededError(InternalError):
    details = "Repository ingestion did not finish within the request deadline"
