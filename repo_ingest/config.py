import os
import dotenv
from dataclasses import dataclass
from typing import Mapping, Optional, Tuple

dotenv.load_dotenv()

DEFAULT_BRANCH = "main"

# Noisy / non-code folders
IGNORE_PATTERNS = (
    "node_modules",
    ".git",
    ".github",
    ".vscode",
    ".next",
    "dist",
    "build",
    ".turbo",
    ".changeset",
    ".claude-plugin",
)

# High-signal files for code understanding
ALLOWED_EXTENSIONS = (".js", ".ts", ".tsx", ".py", ".java", ".go", ".md")

IGNORE_MATCH_MODES = ("segment", "substring")

MAX_FILES = 2000
MAX_TOTAL_BYTES = 50 * 1024 * 1024
MAX_ARCHIVE_BYTES = 200 * 1024 * 1024
DOWNLOAD_TIMEOUT = 30.0
MAX_REDIRECTS = 5
REQUEST_DEADLINE = 120.0
USER_AGENT = "github-zip-ingestion-tool"
CODELOAD_BASE_URL = "https://codeload.github.com"
MAX_CONCURRENT_INGESTIONS = 2


def _split_list(raw: str) -> Tuple[str, ...]:
    return tuple(item.strip() for item in raw.split(",") if item.strip())


def _positive_int(name: str, raw: str) -> int:
    try:
        value = int(raw)
    except ValueError:
        raise ValueError(f"{name} must be an integer, got {raw!r}") from None
    if value < 1:
        raise ValueError(f"{name} must be at least 1, got {value}")
    return value


def _positive_float(name: str, raw: str) -> float:
    try:
        value = float(raw)
    except ValueError:
        raise ValueError(f"{name} must be a number, got {raw!r}") from None
    if value <= 0:
        raise ValueError(f"{name} must be greater than 0, got {value}")
    return value


@dataclass(frozen=True)
class IngestionSettings:
    """Immutable ingestion configuration, loaded once at startup."""

    default_branch: str = DEFAULT_BRANCH
    ignore_patterns: Tuple[str, ...] = IGNORE_PATTERNS
    ignore_match_mode: str = "segment"
    allowed_extensions: Tuple[str, ...] = ALLOWED_EXTENSIONS
    max_files: int = MAX_FILES
    max_total_bytes: int = MAX_TOTAL_BYTES
    max_archive_bytes: int = MAX_ARCHIVE_BYTES
    download_timeout: float = DOWNLOAD_TIMEOUT
    max_redirects: int = MAX_REDIRECTS
    request_deadline: float = REQUEST_DEADLINE
    user_agent: str = USER_AGENT
    codeload_base_url: str = CODELOAD_BASE_URL
    max_concurrent_ingestions: int = MAX_CONCURRENT_INGESTIONS

    def __post_init__(self):
        if self.ignore_match_mode not in IGNORE_MATCH_MODES:
            raise ValueError(
                f"ignore_match_mode must be one of {', '.join(IGNORE_MATCH_MODES)}, "
                f"got {self.ignore_match_mode!r}"
            )
        if not self.default_branch:
            raise ValueError("default_branch cannot be empty")
        if not self.allowed_extensions:
            raise ValueError("allowed_extensions cannot be empty")
        if self.max_files < 1:
            raise ValueError(f"max_files must be at least 1, got {self.max_files}")

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "IngestionSettings":
        """
        Build settings from ``INGEST_*`` environment variables.

        Unset variables keep their compiled-in defaults. List values are
        comma separated.
        """
        env = os.environ if environ is None else environ
        overrides = {}

        def get(name: str) -> Optional[str]:
            value = env.get(f"INGEST_{name}")
            return value if value not in (None, "") else None

        if get("DEFAULT_BRANCH"):
            overrides["default_branch"] = get("DEFAULT_BRANCH").strip()
        if get("IGNORE_PATTERNS"):
            overrides["ignore_patterns"] = _split_list(get("IGNORE_PATTERNS"))
        if get("IGNORE_MATCH_MODE"):
            overrides["ignore_match_mode"] = get("IGNORE_MATCH_MODE").strip().lower()
        if get("ALLOWED_EXTENSIONS"):
            overrides["allowed_extensions"] = tuple(
                ext if ext.startswith(".") else f".{ext}"
                for ext in _split_list(get("ALLOWED_EXTENSIONS"))
            )

        for name, field_name in (
            ("MAX_FILES", "max_files"),
            ("MAX_TOTAL_BYTES", "max_total_bytes"),
            ("MAX_ARCHIVE_BYTES", "max_archive_bytes"),
            ("MAX_REDIRECTS", "max_redirects"),
            ("MAX_CONCURRENT_INGESTIONS", "max_concurrent_ingestions"),
        ):
            if get(name):
                overrides[field_name] = _positive_int(f"INGEST_{name}", get(name))

        for name, field_name in (
            ("DOWNLOAD_TIMEOUT", "download_timeout"),
            ("REQUEST_DEADLINE", "request_deadline"),
        ):
            if get(name):
                overrides[field_name] = _positive_float(f"INGEST_{name}", get(name))

        if get("USER_AGENT"):
            overrides["user_agent"] = get("USER_AGENT")
        if get("CODELOAD_BASE_URL"):
            overrides["codeload_base_url"] = get("CODELOAD_BASE_URL").rstrip("/")

        return cls(**overrides)


HOST = os.getenv("HOST", "0.0.0.0")
PORT = int(os.getenv("PORT", 3000))
RELOAD = os.getenv("RELOAD", "false").lower() in ("1", "true", "yes")
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
LOG_FILE = os.getenv("LOG_FILE")
CORS_ORIGINS = _split_list(os.getenv("CORS_ORIGINS", "*"))
