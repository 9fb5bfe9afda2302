"""Constants for linctl."""

from __future__ import annotations

# GraphQL endpoint
API_ENDPOINT = "https://api.linear.app/graphql"

# Environment variables
API_KEY_ENV = "LINEAR_API_KEY"
CONFIG_DIR_ENV = "LINCTL_CONFIG_DIR"

# Config and cache filenames (both live in the config directory)
CONFIG_FILENAME = "config.toml"
CACHE_FILENAME = "cache.json"
APP_DIRNAME = "linctl"

# Identifier cache freshness window, in seconds
CACHE_TTL_SECS = 3600

# Pagination
DEFAULT_LIST_LIMIT = 25
MAX_PAGE_SIZE = 250
FETCH_ALL_PAGE_SIZE = 100

# Bulk downloads
BATCH_MAX_WORKERS = 4
HTTP_TIMEOUT_SECS = 30.0

# Hosts whose assets require the API credential
ASSET_HOSTS = ("linear.app",)

DEFAULT_ATTACHMENT_EXT = "bin"
DEFAULT_IMAGE_EXT = "png"

# Issue references longer than this without a hyphen are internal ids
OPAQUE_ID_MIN_LENGTH = 31

CONTENT_TYPES: dict[str, str] = {
    "png": "image/png",
    "jpg": "image/jpeg",
    "jpeg": "image/jpeg",
    "gif": "image/gif",
    "webp": "image/webp",
    "svg": "image/svg+xml",
    "pdf": "application/pdf",
    "txt": "text/plain",
    "md": "text/markdown",
    "json": "application/json",
    "xml": "application/xml",
    "zip": "application/zip",
    "tar": "application/x-tar",
    "gz": "application/gzip",
}
DEFAULT_CONTENT_TYPE = "application/octet-stream"

# Extensions that make a title usable as a filename on its own
KNOWN_EXTENSIONS = frozenset(CONTENT_TYPES) | frozenset(
    {"csv", "log", "mp4", "mov", "html", "doc", "docx", "xls", "xlsx", "bmp"},
)

PRIORITY_LABELS: dict[int, str] = {
    0: "None",
    1: "Urgent",
    2: "High",
    3: "Medium",
    4: "Low",
}

# Rich styles for CLI display
PRIORITY_STYLES: dict[int, str] = {
    1: "bold red",
    2: "bold yellow",
    3: "blue",
    4: "bright_black",
}

# Fallback status styles when the workflow state carries no color
STATUS_STYLES: tuple[tuple[tuple[str, ...], str], ...] = (
    (("done", "complete", "closed"), "green"),
    (("progress", "started"), "blue"),
    (("review",), "magenta"),
    (("blocked", "canceled", "cancelled"), "red"),
    (("backlog", "triage"), "bright_black"),
)

TITLE_WIDTH = 50
