"""Shared fixtures: in-memory ZIP archives and a fake requests session."""

import io
import struct
import zipfile
from typing import Dict, Iterable, List, Optional, Tuple

import pytest

from repo_ingest.config import IngestionSettings
from repo_ingest.services.archive_ingestor import GitHubArchiveIngester

SAMPLE_ENTRIES = [
    ("widgets-main/", None),
    ("widgets-main/src/a.js", b"console.log('a');\n"),
    ("widgets-main/node_modules/x.js", b"module.exports = 1;\n"),
    ("widgets-main/README.md", b"# Widgets\n"),
    ("widgets-main/dist/out.js", b"var out;\n"),
    ("widgets-main/b.py", b"print('b')\n"),
]


def build_zip(entries: Iterable[Tuple[str, Optional[bytes]]],
              compression: int = zipfile.ZIP_DEFLATED) -> bytes:
    """Build ZIP bytes; a ``None`` payload marks a directory entry."""
    buffer = io.BytesIO()
    with zipfile.ZipFile(buffer, "w", compression) as archive:
        for name, data in entries:
            if data is None:
                archive.writestr(zipfile.ZipInfo(name), b"")
            else:
                archive.writestr(name, data)
    return buffer.getvalue()


DAMAGED_MEMBER = ("r-main/a.py", b"print('hello world')\n" * 20)

DAMAGE_KINDS = (
    "bad_crc",
    "bad_deflate_stream",
    "encryption_flag",
    "bad_name_encoding",
    "bad_directory_offset",
)


def damaged_zip(kind: str) -> bytes:
    """Return a one-member archive carrying a single structural defect."""
    name, _ = DAMAGED_MEMBER
    compression = zipfile.ZIP_STORED if kind == "bad_crc" else zipfile.ZIP_DEFLATED
    data = bytearray(build_zip([DAMAGED_MEMBER], compression))
    central = data.index(b"PK\x01\x02")
    end = data.rindex(b"PK\x05\x06")
    flags = struct.unpack_from("<H", data, central + 8)[0]

    if kind == "bad_crc":
        start = data.index(b"hello")
        data[start:start + 5] = b"HELLO"
    elif kind == "bad_deflate_stream":
        compressed_size = struct.unpack_from("<I", data, 18)[0]
        name_len, extra_len = struct.unpack_from("<HH", data, 26)
        start = 30 + name_len + extra_len
        data[start:start + compressed_size] = b"\xff" * compressed_size
    elif kind == "encryption_flag":
        struct.pack_into("<H", data, central + 8, flags | 0x1)
    elif kind == "bad_name_encoding":
        struct.pack_into("<H", data, central + 8, flags | 0x800)
        data[central + 46 + name.index("a.py")] = 0xFF
    elif kind == "bad_directory_offset":
        struct.pack_into("<I", data, end + 12, 0x7FFFFFFF)
    else:
        raise ValueError(f"unknown damage kind: {kind}")
    return bytes(data)


class FakeResponse:
    """Minimal stand-in for a streamed ``requests.Response``."""

    def __init__(self, status_code: int = 200, body: bytes = b"",
                 headers: Optional[Dict[str, str]] = None,
                 stream_error: Optional[Exception] = None):
        self.status_code = status_code
        self.body = body
        self.headers = headers or {}
        self.stream_error = stream_error
        self.closed = False

    @property
    def ok(self) -> bool:
        return self.status_code < 400

    def iter_content(self, chunk_size: int = 1):
        for start in range(0, len(self.body), chunk_size):
            yield self.body[start:start + chunk_size]
        if self.stream_error is not None:
            raise self.stream_error

    def close(self):
        self.closed = True

    def __enter__(self):
        return self

    def __exit__(self, *exc_info):
        self.close()


class FakeSession:
    """Records GET calls and returns a canned response or raises an error."""

    def __init__(self, response: Optional[FakeResponse] = None,
                 error: Optional[Exception] = None):
        self.response = response or FakeResponse()
        self.error = error
        self.calls: List[Tuple[str, Dict]] = []
        self.max_redirects = 30
        self.closed = False

    def get(self, url: str, **kwargs):
        self.calls.append((url, kwargs))
        if self.error is not None:
            raise self.error
        return self.response

    def __enter__(self):
        return self

    def __exit__(self, *exc_info):
        self.closed = True


@pytest.fixture
def sample_zip() -> bytes:
    return build_zip(SAMPLE_ENTRIES)


@pytest.fixture
def make_ingester():
    """Factory returning an ingester wired to a FakeSession, plus the session."""

    def _make(settings: Optional[IngestionSettings] = None,
              body: bytes = b"", status_code: int = 200,
              headers: Optional[Dict[str, str]] = None,
              error: Optional[Exception] = None,
              stream_error: Optional[Exception] = None):
        session = FakeSession(
            FakeResponse(status_code=status_code, body=body, headers=headers,
                         stream_error=stream_error),
            error=error,
        )
        ingester = GitHubArchiveIngester(settings or IngestionSettings(),
                                         session_factory=lambda: session)
        return ingester, session

    return _make
