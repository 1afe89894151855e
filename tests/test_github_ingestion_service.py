"""Unit tests for GitHubIngestionService."""

import asyncio
import time

import pytest

from repo_ingest.config import IngestionSettings
from repo_ingest.errors import DeadlineExceededError, InvalidRequestError
from repo_ingest.models.schemas import IngestionResult
from repo_ingest.services.github_ingestion_service import GitHubIngestionService


class RecordingIngester:
    """Ingester stub that records references and optionally stalls."""

    def __init__(self, delay: float = 0.0):
        self.delay = delay
        self.calls = []

    def ingest(self, ref, deadline=None):
        self.calls.append((ref, deadline))
        time.sleep(self.delay)
        return IngestionResult.from_documents(ref, [])


@pytest.fixture
def make_service():
    services = []

    def _make(settings=None, delay=0.0):
        ingester = RecordingIngester(delay)
        service = GitHubIngestionService(settings or IngestionSettings(), ingester=ingester)
        services.append(service)
        return service, ingester

    yield _make
    for service in services:
        service.shutdown()


def test_resolves_and_ingests(make_service):
    service, ingester = make_service(IngestionSettings(default_branch="trunk"))
    result = asyncio.run(service.ingest_repository("https://github.com/acme/widgets"))

    assert result.repo == "acme/widgets"
    assert result.branch == "trunk"
    ref, deadline = ingester.calls[0]
    assert ref.full_name == "acme/widgets"
    assert deadline > time.monotonic()


def test_invalid_input_never_reaches_ingester(make_service):
    service, ingester = make_service()
    with pytest.raises(InvalidRequestError):
        asyncio.run(service.ingest_repository("not a url"))
    assert ingester.calls == []


def test_request_deadline(make_service):
    service, _ = make_service(IngestionSettings(request_deadline=0.05), delay=0.5)
    with pytest.raises(DeadlineExceededError) as excinfo:
        asyncio.run(service.ingest_repository("https://github.com/acme/widgets"))
    assert excinfo.value.status_code == 500
