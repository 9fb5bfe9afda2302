"""Attachment and image commands for linctl CLI."""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

import typer

from linctl import queries
from linctl.assets import (
    download_attachments,
    download_images,
    ensure_output_dir,
    parse_markdown_images,
    upload_file,
    validate_url,
)
from linctl.errors import IssueNotFoundError, LinctlError

from ._cmd_issues import fetch_issue
from ._formatting import attachment_compact, attachment_row
from ._helpers import SortedGroup, fail, get_state, require_success

if TYPE_CHECKING:
    from linctl.batch import BatchResult
    from linctl.client import LinearClient
    from linctl.models import Attachment
    from linctl.output import Renderer

attachments_app = typer.Typer(
    help="List and download issue attachments",
    no_args_is_help=True,
    cls=SortedGroup,
)
images_app = typer.Typer(
    help="Download images embedded in issue descriptions",
    no_args_is_help=True,
    cls=SortedGroup,
)

_DIR_HELP = "Directory to save files into"
_MKDIR_HELP = "Create the directory if it does not exist"


def fetch_attachments(client: LinearClient, issue_id: str) -> list[Attachment]:
    """Fetch an issue's attachments.

    Raises:
        IssueNotFoundError: If the issue does not exist
    """
    attachments = client.execute(queries.LIST_ATTACHMENTS, {"issueId": issue_id})
    if attachments is None:
        raise IssueNotFoundError(issue_id)
    return attachments


def report_batch(
    renderer: Renderer,
    result: BatchResult,
    kind: str,
    urls: dict[int, str],
) -> None:
    """Print one line per outcome plus a summary.

    Partial failure is reported but is not an error exit.
    """
    for outcome in result.outcomes:
        if outcome.ok:
            renderer.render_message(
                f"Downloaded {kind} {outcome.index} to {outcome.path}",
            )
        else:
            url = urls.get(outcome.index, "-")
            renderer.render_error(
                f"Failed to download {kind} {outcome.index} ({url}): {outcome.error}",
            )

    succeeded = len(result.successes)
    failed = len(result.failures)
    if failed:
        renderer.render_message(
            f"Downloaded {succeeded}/{len(result)} {kind}s ({failed} failed)",
        )
    elif succeeded > 1:
        renderer.render_message(f"Downloaded {succeeded} {kind}s")


def _attachment_urls(attachments: list[Attachment]) -> dict[int, str]:
    return {i: a.url or "-" for i, a in enumerate(attachments, start=1)}


def register(app: typer.Typer, issue_app: typer.Typer) -> None:
    """Register attachment, image, attach and upload commands."""

    @attachments_app.command("list")
    def attachments_list(
        ctx: typer.Context,
        issue_id: str = typer.Argument(..., help="Issue identifier (e.g. ENG-123)"),
    ) -> None:
        """List an issue's attachments."""
        state = get_state(ctx)
        try:
            attachments = fetch_attachments(state.client, issue_id)
        except LinctlError as e:
            fail(state, e)

        renderer = state.renderer
        if not attachments and not renderer.is_json:
            renderer.render_message(f"No attachments found for {issue_id}")
            return
        numbers = {a.id: i for i, a in enumerate(attachments, start=1)}
        renderer.render_collection(
            attachments,
            lambda a: attachment_row(renderer, numbers[a.id], a),
            lambda a: attachment_compact(numbers[a.id], a),
        )

    @attachments_app.command("download")
    def attachments_download(
        ctx: typer.Context,
        issue_id: str = typer.Argument(..., help="Issue identifier (e.g. ENG-123)"),
        index: int | None = typer.Option(
            None,
            "--index",
            "-i",
            help="Download only the Nth attachment (1-based)",
        ),
        output_dir: Path = typer.Option(Path("."), "--dir", "-d", help=_DIR_HELP),
        mkdir: bool = typer.Option(False, "--mkdir", help=_MKDIR_HELP),
    ) -> None:
        """Download an issue's attachments."""
        state = get_state(ctx)
        try:
            ensure_output_dir(output_dir, create=mkdir)
            attachments = fetch_attachments(state.client, issue_id)
            if not attachments:
                state.renderer.render_message(f"No attachments found for {issue_id}")
                return
            result = download_attachments(
                state.client,
                attachments,
                output_dir,
                index=index,
                prefix=f"{issue_id}__",
            )
        except LinctlError as e:
            fail(state, e)

        report_batch(
            state.renderer,
            result,
            "attachment",
            _attachment_urls(attachments),
        )

    @images_app.command("download")
    def images_download(
        ctx: typer.Context,
        issue_id: str = typer.Argument(..., help="Issue identifier (e.g. ENG-123)"),
        index: int | None = typer.Option(
            None,
            "--index",
            "-i",
            help="Download only the Nth image (1-based)",
        ),
        output_dir: Path = typer.Option(Path("."), "--dir", "-d", help=_DIR_HELP),
        mkdir: bool = typer.Option(False, "--mkdir", help=_MKDIR_HELP),
    ) -> None:
        """Download images embedded in an issue's description."""
        state = get_state(ctx)
        try:
            ensure_output_dir(output_dir, create=mkdir)
            issue = fetch_issue(state.client, issue_id)
            images = parse_markdown_images(issue.description or "")
            if not images:
                state.renderer.render_message(
                    f"No images found in {issue.identifier} description",
                )
                return
            result = download_images(
                state.client,
                images,
                output_dir,
                index=index,
                prefix=f"{issue.identifier}__",
            )
        except LinctlError as e:
            fail(state, e)

        urls = {i: image.url for i, image in enumerate(images, start=1)}
        report_batch(state.renderer, result, "image", urls)

    @issue_app.command("download")
    def download(
        ctx: typer.Context,
        issue_id: str = typer.Argument(..., help="Issue identifier (e.g. ENG-123)"),
        output_dir: Path = typer.Option(Path("."), "--dir", "-d", help=_DIR_HELP),
        mkdir: bool = typer.Option(False, "--mkdir", help=_MKDIR_HELP),
    ) -> None:
        """Download all attachments and description images of an issue."""
        state = get_state(ctx)
        renderer = state.renderer
        try:
            ensure_output_dir(output_dir, create=mkdir)
            issue = fetch_issue(state.client, issue_id)
            attachments = fetch_attachments(state.client, issue.identifier)
            images = parse_markdown_images(issue.description or "")
            prefix = f"{issue.identifier}__"
            attachment_result = download_attachments(
                state.client,
                attachments,
                output_dir,
                prefix=prefix,
            )
            image_result = download_images(
                state.client,
                images,
                output_dir,
                prefix=prefix,
            )
        except LinctlError as e:
            fail(state, e)

        if not attachments and not images:
            renderer.render_message(f"Nothing to download for {issue.identifier}")
            return
        report_batch(
            renderer,
            attachment_result,
            "attachment",
            _attachment_urls(attachments),
        )
        report_batch(
            renderer,
            image_result,
            "image",
            {i: image.url for i, image in enumerate(images, start=1)},
        )

    @issue_app.command("attach")
    def attach(
        ctx: typer.Context,
        issue_id: str = typer.Argument(..., help="Issue identifier (e.g. ENG-123)"),
        url: str = typer.Argument(..., help="URL to attach"),
        title: str | None = typer.Option(None, "--title", "-t", help="Link title"),
    ) -> None:
        """Attach a URL to an issue."""
        state = get_state(ctx)
        try:
            validate_url(url)
            variables = {"issueId": issue_id, "url": url}
            if title:
                variables["title"] = title
            result = require_success(
                state.client.execute(queries.ATTACH_URL, variables),
                "attach URL",
            )
        except LinctlError as e:
            fail(state, e)

        state.renderer.render_message(
            f'Attached "{result.title or url}" to {issue_id}',
        )

    @issue_app.command("upload")
    def upload(
        ctx: typer.Context,
        issue_id: str = typer.Argument(..., help="Issue identifier (e.g. ENG-123)"),
        file: Path = typer.Argument(..., help="File to upload"),
        title: str | None = typer.Option(
            None,
            "--title",
            "-t",
            help="Attachment title (default: file name)",
        ),
    ) -> None:
        """Upload a file and attach it to an issue."""
        state = get_state(ctx)
        try:
            result = require_success(
                upload_file(state.client, issue_id, file, title),
                "attachment creation",
            )
        except (LinctlError, OSError) as e:
            fail(state, e)

        state.renderer.render_message(
            f'Uploaded "{result.title or title or file.name}" to {issue_id}',
        )

    issue_app.add_typer(attachments_app, name="attachments")
    issue_app.add_typer(images_app, name="images")
