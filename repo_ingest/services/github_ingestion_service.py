#!/usr/bin/env python3
"""
GitHub Repository Ingestion Service

This service resolves repository references and runs archive ingestion on a
thread pool so the FastAPI event loop is never blocked.
"""

import time
import logging
import asyncio
from concurrent.futures import ThreadPoolExecutor
from typing import Optional

from repo_ingest.config import IngestionSettings
from repo_ingest.errors import DeadlineExceededError
from repo_ingest.models.schemas import IngestionResult, RepoReference
from repo_ingest.services.archive_ingestor import GitHubArchiveIngester
from repo_ingest.services.reference_resolver import resolve_reference

logger = logging.getLogger(__name__)


class GitHubIngestionService:
    """Service for turning GitHub repositories into document lists."""

    def __init__(self, settings: Optional[IngestionSettings] = None,
                 ingester: Optional[GitHubArchiveIngester] = None):
        self.settings = settings or IngestionSettings.from_env()
        self.ingester = ingester or GitHubArchiveIngester(self.settings)
        # Limit concurrent ingestions
        self.executor = ThreadPoolExecutor(max_workers=self.settings.max_concurrent_ingestions)

    def resolve(self, repo_url: Optional[str], branch: Optional[str] = None) -> RepoReference:
        return resolve_reference(repo_url, branch, default_branch=self.settings.default_branch)

    async def ingest_repository(self, repo_url: Optional[str],
                                branch: Optional[str] = None) -> IngestionResult:
        """
        Ingest a GitHub repository.

        The reference is resolved before any work is scheduled, so invalid
        input never reaches the network.

        Args:
            repo_url: GitHub repository URL
            branch: Repository branch, defaults to the configured branch

        Returns:
            IngestionResult for the branch snapshot
        """
        ref = self.resolve(repo_url, branch)
        timeout = self.settings.request_deadline
        deadline = time.monotonic() + timeout
        logger.info(f"[SERVICE START] Repository: {ref.full_name}, Branch: {ref.branch}")

        loop = asyncio.get_running_loop()
        try:
            result = await asyncio.wait_for(
                loop.run_in_executor(self.executor, self.ingester.ingest, ref, deadline),
                timeout=timeout,
            )
        except asyncio.TimeoutError as e:
            raise DeadlineExceededError(
                f"Ingestion of {ref.full_name}@{ref.branch} exceeded {timeout:.0f}s"
            ) from e

        logger.info(f"[SERVICE SUCCESS] {ref.full_name}@{ref.branch}: {result.file_count} documents")
        return result

    def shutdown(self):
        self.executor.shutdown(wait=False)


# Global service instance
github_ingestion_service = GitHubIngestionService()


def get_ingestion_service() -> GitHubIngestionService:
    return github_ingestion_service
