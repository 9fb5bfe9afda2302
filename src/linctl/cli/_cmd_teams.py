"""Team, project and label listing commands for linctl CLI."""

from __future__ import annotations

from functools import partial
from typing import Any

import typer

from linctl import queries
from linctl.errors import LinctlError
from linctl.pagination import fetch_every

from ._formatting import (
    label_compact,
    label_row,
    project_compact,
    project_row,
    team_compact,
    team_row,
)
from ._helpers import fail, get_state


def team_filter(team_key: str | None, field: str = "team") -> dict[str, Any]:
    """Build ``{"filter": {<field>: {key: {eqIgnoreCase: KEY}}}}`` or no filter."""
    if not team_key:
        return {}
    return {"filter": {field: {"key": {"eqIgnoreCase": team_key}}}}


def register(app: typer.Typer, issue_app: typer.Typer) -> None:
    """Register teams, projects and labels commands."""

    @app.command()
    def teams(ctx: typer.Context) -> None:
        """List teams."""
        state = get_state(ctx)
        try:
            records = fetch_every(state.client, queries.LIST_TEAMS)
        except LinctlError as e:
            fail(state, e)

        renderer = state.renderer
        if not records and not renderer.is_json:
            renderer.render_message("No teams found")
            return
        renderer.render_collection(records, partial(team_row, renderer), team_compact)

    @app.command()
    def projects(
        ctx: typer.Context,
        team: str | None = typer.Option(None, "--team", help="Team key"),
    ) -> None:
        """List projects, optionally those accessible to one team."""
        state = get_state(ctx)
        try:
            team_key = state.config.resolve_team(team)
            records = fetch_every(
                state.client,
                queries.LIST_PROJECTS,
                team_filter(team_key, "accessibleTeams"),
            )
        except LinctlError as e:
            fail(state, e)

        renderer = state.renderer
        if not records and not renderer.is_json:
            renderer.render_message("No projects found")
            return
        renderer.render_collection(
            records,
            partial(project_row, renderer),
            project_compact,
        )

    @app.command()
    def labels(
        ctx: typer.Context,
        team: str | None = typer.Option(None, "--team", help="Team key"),
    ) -> None:
        """List issue labels."""
        state = get_state(ctx)
        try:
            team_key = state.config.resolve_team(team)
            records = fetch_every(
                state.client,
                queries.LIST_LABELS,
                team_filter(team_key),
            )
        except LinctlError as e:
            fail(state, e)

        renderer = state.renderer
        if not records and not renderer.is_json:
            renderer.render_message("No labels found")
            return
        renderer.render_collection(records, partial(label_row, renderer), label_compact)
