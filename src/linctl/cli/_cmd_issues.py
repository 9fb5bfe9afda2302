"""Issue list, view, create, update and close commands for linctl CLI."""

from __future__ import annotations

import logging
from functools import partial
from typing import TYPE_CHECKING, Any

import typer

from linctl import queries
from linctl.constants import DEFAULT_LIST_LIMIT, MAX_PAGE_SIZE
from linctl.errors import IssueNotFoundError, LinctlError
from linctl.pagination import collect

from ._formatting import format_issue_detail, issue_compact, issue_row
from ._helpers import (
    fail,
    get_state,
    issue_label,
    priority_option,
    require_success,
)

if TYPE_CHECKING:
    from linctl.client import LinearClient
    from linctl.models import Issue
    from linctl.pagination import Page
    from linctl.resolve import Resolver

logger = logging.getLogger(__name__)


def _contains(value: str) -> dict[str, Any]:
    return {"name": {"containsIgnoreCase": value}}


def build_issue_filter(
    team_key: str | None = None,
    status: str | None = None,
    project: str | None = None,
    label: str | None = None,
    cycle: str | None = None,
    assignee_id: str | None = None,
) -> dict[str, Any]:
    """Build an IssueFilter from list options.

    The team matches by key ignoring case, as team resolution does; status,
    project, label and cycle match names by case-insensitive substring.
    """
    issue_filter: dict[str, Any] = {}
    if team_key:
        issue_filter["team"] = {"key": {"eqIgnoreCase": team_key}}
    if status:
        issue_filter["state"] = _contains(status)
    if project:
        issue_filter["project"] = _contains(project)
    if label:
        issue_filter["labels"] = _contains(label)
    if cycle:
        issue_filter["cycle"] = _contains(cycle)
    if assignee_id:
        issue_filter["assignee"] = {"id": {"eq": assignee_id}}
    return issue_filter


def fetch_issue(client: LinearClient, ref: str) -> Issue:
    """Fetch one issue by identifier or id.

    Raises:
        IssueNotFoundError: If it does not exist
    """
    issue = client.execute(queries.GET_ISSUE, {"id": ref})
    if issue is None:
        raise IssueNotFoundError(ref)
    return issue


def _label_option(labels: list[str] | None) -> list[str]:
    return [name for name in labels or [] if name.strip()]


def _assignee(resolver: Resolver, value: str | None) -> str | None:
    return resolver.assignee_id(value) if value else None


def register(app: typer.Typer, issue_app: typer.Typer) -> None:
    """Register issue commands."""

    def list_issues(
        ctx: typer.Context,
        mine: bool = typer.Option(False, "--mine", help="Only issues assigned to me"),
        team: str | None = typer.Option(None, "--team", help="Team key"),
        status: str | None = typer.Option(None, "--status", help="Status name"),
        project: str | None = typer.Option(None, "--project", help="Project name"),
        label: str | None = typer.Option(None, "--label", help="Label name"),
        cycle: str | None = typer.Option(None, "--cycle", help="Cycle name"),
        limit: int = typer.Option(
            DEFAULT_LIST_LIMIT,
            "--limit",
            "-l",
            help=f"Maximum issues to fetch (at most {MAX_PAGE_SIZE})",
        ),
        fetch_all: bool = typer.Option(
            False,
            "--all",
            help="Fetch every matching issue, page by page",
        ),
    ) -> None:
        """List issues."""
        state = get_state(ctx)
        try:
            issue_filter = build_issue_filter(
                team_key=state.config.resolve_team(team),
                status=status,
                project=project,
                label=label,
                cycle=cycle,
                assignee_id=state.resolver.viewer_id() if mine else None,
            )
            client = state.client

            def fetch(first: int, after: str | None) -> Page[Issue]:
                return client.execute(
                    queries.LIST_ISSUES,
                    {"filter": issue_filter, "first": first, "after": after},
                )

            issues = collect(fetch, limit=limit, fetch_all=fetch_all)
        except LinctlError as e:
            fail(state, e)

        renderer = state.renderer
        if not issues and not renderer.is_json:
            renderer.render_message("No issues found")
            return
        renderer.render_collection(issues, partial(issue_row, renderer), issue_compact)

    app.command("issues")(list_issues)
    issue_app.command("list")(list_issues)

    @issue_app.command("view")
    def view(
        ctx: typer.Context,
        issue_id: str = typer.Argument(..., help="Issue identifier (e.g. ENG-123)"),
    ) -> None:
        """Show issue details."""
        state = get_state(ctx)
        try:
            issue = fetch_issue(state.client, issue_id)
        except LinctlError as e:
            fail(state, e)

        state.renderer.render_single(
            issue,
            partial(format_issue_detail, state.renderer),
        )

    @issue_app.command("create")
    def create(
        ctx: typer.Context,
        title: str = typer.Option(..., "--title", "-t", help="Issue title"),
        description: str | None = typer.Option(
            None,
            "--description",
            "-d",
            help="Issue description (markdown)",
        ),
        team: str | None = typer.Option(None, "--team", help="Team key"),
        project: str | None = typer.Option(None, "--project", help="Project name"),
        priority: str | None = typer.Option(
            None,
            "--priority",
            "-p",
            help="Priority: 0-4 or none/urgent/high/medium/low",
        ),
        labels: list[str] | None = typer.Option(
            None,
            "--label",
            help="Label name (repeatable)",
        ),
        assignee: str | None = typer.Option(
            None,
            "--assignee",
            "-a",
            help="User id, or 'me'",
        ),
    ) -> None:
        """Create an issue."""
        state = get_state(ctx)
        try:
            resolver = state.resolver
            parsed_priority = priority_option(priority)
            team_id = resolver.team_id(state.config.resolve_team(team))

            issue_input: dict[str, Any] = {"title": title, "teamId": team_id}
            if description:
                issue_input["description"] = description
            if parsed_priority is not None:
                issue_input["priority"] = int(parsed_priority)
            if project:
                issue_input["projectId"] = resolver.project_id(project)
            label_names = _label_option(labels)
            if label_names:
                issue_input["labelIds"] = resolver.label_ids(label_names, team_id)
            assignee_id = _assignee(resolver, assignee)
            if assignee_id:
                issue_input["assigneeId"] = assignee_id

            logger.debug("Creating issue with fields %s", sorted(issue_input))
            result = require_success(
                state.client.execute(queries.CREATE_ISSUE, {"input": issue_input}),
                "issue creation",
            )
        except LinctlError as e:
            fail(state, e)

        state.renderer.render_message(f"Created {issue_label(result, title)}")

    @issue_app.command("update")
    def update(
        ctx: typer.Context,
        issue_id: str = typer.Argument(..., help="Issue identifier (e.g. ENG-123)"),
        title: str | None = typer.Option(None, "--title", "-t", help="New title"),
        description: str | None = typer.Option(
            None,
            "--description",
            "-d",
            help="New description",
        ),
        status: str | None = typer.Option(None, "--status", "-s", help="Status name"),
        priority: str | None = typer.Option(
            None,
            "--priority",
            "-p",
            help="Priority: 0-4 or none/urgent/high/medium/low",
        ),
        assignee: str | None = typer.Option(
            None,
            "--assignee",
            "-a",
            help="User id, or 'me'",
        ),
        labels: list[str] | None = typer.Option(
            None,
            "--label",
            help="Replace labels (repeatable)",
        ),
    ) -> None:
        """Update an issue."""
        state = get_state(ctx)
        label_names = _label_option(labels)
        fields = (title, description, status, priority, assignee)
        if all(value is None for value in fields) and not label_names:
            state.renderer.render_message("No updates specified")
            return

        try:
            parsed_priority = priority_option(priority)
            resolver = state.resolver
            issue_input: dict[str, Any] = {}
            if title is not None:
                issue_input["title"] = title
            if description is not None:
                issue_input["description"] = description
            if parsed_priority is not None:
                issue_input["priority"] = int(parsed_priority)
            if status or label_names:
                team_id = fetch_issue(state.client, issue_id).team.id
                if status:
                    issue_input["stateId"] = resolver.state_id(team_id, status)
                if label_names:
                    issue_input["labelIds"] = resolver.label_ids(label_names, team_id)
            assignee_id = _assignee(resolver, assignee)
            if assignee_id:
                issue_input["assigneeId"] = assignee_id

            result = require_success(
                state.client.execute(
                    queries.UPDATE_ISSUE,
                    {"id": issue_id, "input": issue_input},
                ),
                "issue update",
            )
        except LinctlError as e:
            fail(state, e)

        state.renderer.render_message(f"Updated {issue_label(result, issue_id)}")

    @issue_app.command("close")
    def close(
        ctx: typer.Context,
        issue_id: str = typer.Argument(..., help="Issue identifier (e.g. ENG-123)"),
    ) -> None:
        """Close an issue by moving it to its team's completed state."""
        state = get_state(ctx)
        try:
            issue = fetch_issue(state.client, issue_id)
            state_id = state.resolver.completed_state_id(issue.team.id)
            result = require_success(
                state.client.execute(
                    queries.UPDATE_ISSUE,
                    {"id": issue_id, "input": {"stateId": state_id}},
                ),
                "issue close",
            )
        except LinctlError as e:
            fail(state, e)

        state.renderer.render_message(f"Closed {issue_label(result, issue.identifier)}")
