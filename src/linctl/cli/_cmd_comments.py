"""Comment commands for linctl CLI."""

from __future__ import annotations

from functools import partial

import typer

from linctl import queries
from linctl.errors import IssueNotFoundError, LinctlError

from ._formatting import comment_compact, comment_row
from ._helpers import fail, get_state, require_success


def register(app: typer.Typer, issue_app: typer.Typer) -> None:
    """Register comments and comment commands."""

    @issue_app.command("comments")
    def comments(
        ctx: typer.Context,
        issue_id: str = typer.Argument(..., help="Issue identifier (e.g. ENG-123)"),
    ) -> None:
        """List comments on an issue."""
        state = get_state(ctx)
        try:
            records = state.client.execute(queries.LIST_COMMENTS, {"issueId": issue_id})
            if records is None:
                raise IssueNotFoundError(issue_id)
        except LinctlError as e:
            fail(state, e)

        renderer = state.renderer
        if not records and not renderer.is_json:
            renderer.render_message(f"No comments on {issue_id}")
            return
        renderer.render_collection(
            records,
            partial(comment_row, renderer),
            comment_compact,
        )

    @issue_app.command("comment")
    def comment(
        ctx: typer.Context,
        issue_id: str = typer.Argument(..., help="Issue identifier (e.g. ENG-123)"),
        body: str = typer.Argument(..., help="Comment text (markdown)"),
    ) -> None:
        """Add a comment to an issue."""
        state = get_state(ctx)
        if not body.strip():
            state.renderer.render_error("Comment body cannot be empty")
            raise typer.Exit(1)
        try:
            require_success(
                state.client.execute(
                    queries.CREATE_COMMENT,
                    {"issueId": issue_id, "body": body},
                ),
                "comment creation",
            )
        except LinctlError as e:
            fail(state, e)

        state.renderer.render_message(f"Added comment to {issue_id}")
