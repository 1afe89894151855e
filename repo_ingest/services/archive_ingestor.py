#!/usr/bin/env python3
"""
GitHub Archive Ingester

Downloads a branch snapshot from the codeload endpoint as a ZIP archive,
walks its entries and turns the accepted source files into documents for
downstream indexing.
"""

import io
import time
import zlib
import logging
import zipfile
from typing import Callable, Iterator, List, Optional
from urllib.parse import quote

import requests

from repo_ingest.config import IngestionSettings
from repo_ingest.errors import (
    ArchiveDownloadError,
    ArchiveTooLargeError,
    CorruptArchiveError,
    DeadlineExceededError,
)
from repo_ingest.models.schemas import ArchiveEntry, Document, IngestionResult, RepoReference

logger = logging.getLogger(__name__)

CHUNK_SIZE = 64 * 1024


class GitHubArchiveIngester:
    """Branch snapshot download plus filtered archive walk."""

    def __init__(self, settings: Optional[IngestionSettings] = None,
                 session_factory: Callable[[], requests.Session] = requests.Session):
        """
        Initialize the archive ingester.

        Args:
            settings: Ingestion configuration, defaults to compiled-in values
            session_factory: Builds one HTTP session per download
        """
        self.settings = settings or IngestionSettings()
        self.session_factory = session_factory
        self.headers = {
            'User-Agent': self.settings.user_agent,
            'Accept': 'application/zip',
        }
        self._ignore_set = frozenset(self.settings.ignore_patterns)

    def build_archive_url(self, ref: RepoReference) -> str:
        return (
            f"{self.settings.codeload_base_url}/{quote(ref.owner, safe='')}/"
            f"{quote(ref.name, safe='')}/zip/refs/heads/{quote(ref.branch, safe='/')}"
        )

    def _check_deadline(self, deadline: Optional[float], ref: RepoReference):
        if deadline is not None and time.monotonic() > deadline:
            raise DeadlineExceededError(
                f"Deadline exceeded while ingesting {ref.full_name}@{ref.branch}"
            )

    def download_archive(self, ref: RepoReference, deadline: Optional[float] = None) -> bytes:
        """
        Download the ZIP snapshot of ``ref``.

        Raises:
            ArchiveDownloadError: on any transport or HTTP level failure
            ArchiveTooLargeError: if the archive exceeds ``max_archive_bytes``
        """
        url = self.build_archive_url(ref)
        limit = self.settings.max_archive_bytes
        logger.info(f"[FETCH] Downloading {ref.full_name} (branch: {ref.branch}) from {url}")

        def fail(reason: str, http_status: Optional[int] = None) -> ArchiveDownloadError:
            return ArchiveDownloadError(ref.full_name, ref.branch, reason, http_status)

        with self.session_factory() as session:
            session.max_redirects = self.settings.max_redirects
            try:
                response = session.get(
                    url,
                    headers=self.headers,
                    timeout=self.settings.download_timeout,
                    allow_redirects=True,
                    stream=True,
                )
            except requests.Timeout as e:
                raise fail("timeout") from e
            except requests.TooManyRedirects as e:
                raise fail("too_many_redirects") from e
            except requests.RequestException as e:
                raise fail("connection") from e

            with response:
                if response.status_code == 404:
                    raise fail("not_found", response.status_code)
                if not response.ok:
                    raise fail("http_status", response.status_code)

                declared = response.headers.get("Content-Length", "")
                if declared.isdigit() and int(declared) > limit:
                    raise ArchiveTooLargeError(ref.full_name, int(declared), limit)

                buffer = bytearray()
                try:
                    for chunk in response.iter_content(chunk_size=CHUNK_SIZE):
                        buffer.extend(chunk)
                        if len(buffer) > limit:
                            raise ArchiveTooLargeError(ref.full_name, len(buffer), limit)
                        self._check_deadline(deadline, ref)
                except requests.Timeout as e:
                    raise fail("timeout") from e
                except requests.RequestException as e:
                    raise fail("connection") from e

        logger.info(f"[FETCH COMPLETE] Downloaded {len(buffer):,} bytes for {ref.full_name}")
        return bytes(buffer)

    def open_archive(self, data: bytes) -> zipfile.ZipFile:
        """Parse downloaded bytes as an in-memory ZIP archive."""
        try:
            return zipfile.ZipFile(io.BytesIO(data))
        except (zipfile.BadZipFile, zipfile.LargeZipFile, ValueError, UnicodeDecodeError) as e:
            raise CorruptArchiveError(f"Invalid ZIP archive: {e}") from e

    def iter_entries(self, archive: zipfile.ZipFile) -> Iterator[ArchiveEntry]:
        """Yield archive members in enumeration order."""
        for info in archive.infolist():
            yield ArchiveEntry(
                path=info.filename,
                is_directory=info.is_dir(),
                size=info.file_size,
                loader=lambda info=info: self._read_member(archive, info),
            )

    def _read_member(self, archive: zipfile.ZipFile, info: zipfile.ZipInfo) -> bytes:
        try:
            return archive.read(info)
        except (zipfile.BadZipFile, zlib.error, NotImplementedError, EOFError,
                RuntimeError, ValueError) as e:
            # RuntimeError: encryption flag set without a password
            raise CorruptArchiveError(f"Could not read {info.filename}: {e}") from e

    def is_ignored(self, path: str) -> bool:
        """Check a path against the denylist using the configured match mode."""
        if self.settings.ignore_match_mode == "substring":
            return any(pattern in path for pattern in self.settings.ignore_patterns)
        return any(segment in self._ignore_set for segment in path.split("/"))

    def has_allowed_extension(self, path: str) -> bool:
        return path.endswith(self.settings.allowed_extensions)

    def collect_documents(self, archive: zipfile.ZipFile, ref: RepoReference,
                          deadline: Optional[float] = None) -> List[Document]:
        """
        Walk the archive and build documents for accepted entries.

        Stops once ``max_files`` documents are accepted or the next entry
        would push accepted content past ``max_total_bytes``.
        """
        documents = []
        accepted_bytes = 0
        skipped = 0

        for entry in self.iter_entries(archive):
            self._check_deadline(deadline, ref)

            if entry.is_directory:
                continue
            if self.is_ignored(entry.path) or not self.has_allowed_extension(entry.path):
                skipped += 1
                continue

            if accepted_bytes + entry.size > self.settings.max_total_bytes:
                logger.warning(
                    f"[ARCHIVE] Byte cap of {self.settings.max_total_bytes:,} reached at "
                    f"{entry.path}; stopping with {len(documents)} documents"
                )
                break

            raw = entry.content
            accepted_bytes += len(raw)
            documents.append(Document.from_entry(entry, ref, raw.decode("utf-8", errors="replace")))

            if len(documents) >= self.settings.max_files:
                logger.info(f"[ARCHIVE] File cap of {self.settings.max_files} reached; stopping walk")
                break

        logger.info(
            f"[ARCHIVE] Accepted {len(documents)} files ({accepted_bytes:,} bytes), "
            f"skipped {skipped} filtered files"
        )
        return documents

    def ingest(self, ref: RepoReference, deadline: Optional[float] = None) -> IngestionResult:
        """
        Complete ingestion pipeline for one repository reference.

        Args:
            ref: Resolved repository and branch
            deadline: ``time.monotonic()`` value after which ingestion aborts

        Returns:
            IngestionResult with documents in archive enumeration order
        """
        start_time = time.time()
        logger.info(f"[INGESTION START] Repository: {ref.full_name}, Branch: {ref.branch}")

        logger.info("[STEP 1/2] Downloading repository archive...")
        data = self.download_archive(ref, deadline=deadline)
        download_time = time.time() - start_time

        logger.info("[STEP 2/2] Walking archive entries...")
        step_start = time.time()
        with self.open_archive(data) as archive:
            documents = self.collect_documents(archive, ref, deadline=deadline)
        walk_time = time.time() - step_start

        logger.info(
            f"[INGESTION COMPLETE] {ref.full_name}@{ref.branch}: {len(documents)} documents "
            f"(download {download_time:.2f}s, walk {walk_time:.2f}s)"
        )
        return IngestionResult.from_documents(ref, documents)
