"""Attachment and embedded-image transfers."""

from __future__ import annotations

import re
from dataclasses import dataclass
from pathlib import Path, PurePosixPath
from typing import TYPE_CHECKING
from urllib.parse import unquote, urlparse

from linctl import queries
from linctl.batch import BatchResult, Indexed, run_batch, select_by_index
from linctl.constants import (
    CONTENT_TYPES,
    DEFAULT_ATTACHMENT_EXT,
    DEFAULT_CONTENT_TYPE,
    DEFAULT_IMAGE_EXT,
    KNOWN_EXTENSIONS,
)
from linctl.errors import (
    InvalidUrlError,
    MissingFileError,
    OutputDirNotFoundError,
)

if TYPE_CHECKING:
    from linctl.client import LinearClient
    from linctl.models import Attachment, MutationResult

_UNSAFE_CHARS = re.compile(r"[^A-Za-z0-9._-]")
_MARKDOWN_IMAGE = re.compile(r"!\[([^\]]*)\]\(([^)\s]+)(?:\s+\"[^\"]*\")?\)")


@dataclass
class MarkdownImage:
    """An image embedded in markdown as ``![alt](url)``."""

    alt_text: str
    url: str


def parse_markdown_images(markdown: str) -> list[MarkdownImage]:
    """Extract images from markdown, in document order."""
    return [
        MarkdownImage(alt_text=m.group(1), url=m.group(2))
        for m in _MARKDOWN_IMAGE.finditer(markdown)
    ]


def sanitize_filename(title: str) -> str:
    """Replace every character outside ``[A-Za-z0-9._-]`` with ``_``."""
    return _UNSAFE_CHARS.sub("_", title.strip())


def _extension(name: str) -> str | None:
    suffix = PurePosixPath(name).suffix.lstrip(".").lower()
    return suffix or None


def url_extension(url: str) -> str | None:
    """Infer a file extension from the last segment of a URL path."""
    segment = PurePosixPath(unquote(urlparse(url).path)).name
    ext = _extension(segment)
    if ext and ext.isalnum() and len(ext) <= 5:
        return ext
    return None


def asset_filename(
    title: str,
    index: int,
    url: str,
    *,
    fallback_stem: str = "attachment",
    fallback_ext: str = DEFAULT_ATTACHMENT_EXT,
    prefix: str = "",
) -> str:
    """Build a deterministic filename for a downloaded asset.

    The name is always ``<stem>_<index>.<ext>``, so assets sharing a title
    (pasted screenshots are all ``image.png``) never share a path. The stem
    is the sanitized title, or *fallback_stem* without one. A title ending in
    a known extension supplies both stem and extension; otherwise the
    extension comes from the URL path.
    """
    stem = sanitize_filename(title).strip("._")
    ext = _extension(stem)
    if ext in KNOWN_EXTENSIONS:
        stem = stem[: -len(ext) - 1].rstrip("._")
    else:
        ext = url_extension(url) or fallback_ext
    return f"{prefix}{stem or fallback_stem}_{index}.{ext}"


def guess_content_type(filename: str) -> str:
    return CONTENT_TYPES.get(_extension(filename) or "", DEFAULT_CONTENT_TYPE)


def validate_url(url: str) -> str:
    """Ensure *url* is an absolute http(s) URL.

    Raises:
        InvalidUrlError: Otherwise
    """
    parsed = urlparse(url)
    if parsed.scheme not in ("http", "https") or not parsed.netloc:
        raise InvalidUrlError(url)
    return url


def ensure_output_dir(path: Path, create: bool = False) -> Path:
    """Check the download directory, creating it when asked.

    Raises:
        OutputDirNotFoundError: If it is missing (and not created)
    """
    if create:
        path.mkdir(parents=True, exist_ok=True)
    if not path.is_dir():
        raise OutputDirNotFoundError(path)
    return path


def _write(client: LinearClient, url: str, target: Path) -> Path:
    validate_url(url)
    target.write_bytes(client.fetch_asset(url))
    return target


def download_attachments(
    client: LinearClient,
    attachments: list[Attachment],
    output_dir: Path,
    *,
    index: int | None = None,
    prefix: str = "",
) -> BatchResult:
    """Download attachment files, recording each outcome.

    Raises:
        IndexOutOfBoundsError: If *index* does not select an attachment
    """
    selected = select_by_index(attachments, index)

    def download(entry: Indexed[Attachment]) -> Path:
        attachment = entry.item
        if not attachment.url:
            raise InvalidUrlError(f"<attachment {entry.index} has no URL>")
        name = asset_filename(
            attachment.title,
            entry.index,
            attachment.url,
            prefix=prefix,
        )
        return _write(client, attachment.url, output_dir / name)

    return run_batch(selected, download)


def download_images(
    client: LinearClient,
    images: list[MarkdownImage],
    output_dir: Path,
    *,
    index: int | None = None,
    prefix: str = "",
) -> BatchResult:
    """Download images embedded in an issue description.

    Raises:
        IndexOutOfBoundsError: If *index* does not select an image
    """
    selected = select_by_index(images, index)

    def download(entry: Indexed[MarkdownImage]) -> Path:
        image = entry.item
        name = asset_filename(
            image.alt_text,
            entry.index,
            image.url,
            fallback_stem="image",
            fallback_ext=DEFAULT_IMAGE_EXT,
            prefix=prefix,
        )
        return _write(client, image.url, output_dir / name)

    return run_batch(selected, download)


def upload_file(
    client: LinearClient,
    issue_id: str,
    path: Path,
    title: str | None = None,
) -> MutationResult:
    """Upload a local file and attach it to an issue.

    Three steps, each required before the next: request a signed target,
    PUT the bytes there, then create the attachment record.

    Raises:
        MissingFileError: If *path* is not a file
    """
    if not path.is_file():
        raise MissingFileError(str(path))

    content = path.read_bytes()
    content_type = guess_content_type(path.name)

    target = client.execute(
        queries.FILE_UPLOAD,
        {"filename": path.name, "contentType": content_type, "size": len(content)},
    )

    headers = {"Content-Type": content_type}
    headers.update({h.key: h.value for h in target.headers})
    client.put_asset(target.upload_url, content, headers)

    return client.execute(
        queries.CREATE_ATTACHMENT,
        {"issueId": issue_id, "url": target.asset_url, "title": title or path.name},
    )
