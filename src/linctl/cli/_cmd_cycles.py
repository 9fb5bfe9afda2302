"""Cycle commands for linctl CLI."""

from __future__ import annotations

from functools import partial

import typer

from linctl import queries
from linctl.errors import CycleNotFoundError, LinctlError
from linctl.pagination import fetch_every

from ._cmd_teams import team_filter
from ._formatting import cycle_compact, cycle_row, format_cycle_detail
from ._helpers import SortedGroup, fail, get_state

cycle_app = typer.Typer(
    help="View cycles (sprints)",
    no_args_is_help=True,
    cls=SortedGroup,
)


def _list_cycles(ctx: typer.Context, team: str | None) -> None:
    state = get_state(ctx)
    try:
        team_key = state.config.resolve_team(team)
        records = fetch_every(state.client, queries.LIST_CYCLES, team_filter(team_key))
    except LinctlError as e:
        fail(state, e)

    renderer = state.renderer
    if not records and not renderer.is_json:
        renderer.render_message("No cycles found")
        return
    renderer.render_collection(records, partial(cycle_row, renderer), cycle_compact)


def register(app: typer.Typer, issue_app: typer.Typer) -> None:
    """Register cycles and the cycle command group."""

    @app.command("cycles")
    def cycles(
        ctx: typer.Context,
        team: str | None = typer.Option(None, "--team", help="Team key"),
    ) -> None:
        """List cycles."""
        _list_cycles(ctx, team)

    @cycle_app.command("list")
    def cycle_list(
        ctx: typer.Context,
        team: str | None = typer.Option(None, "--team", help="Team key"),
    ) -> None:
        """List cycles."""
        _list_cycles(ctx, team)

    @cycle_app.command("view")
    def cycle_view(
        ctx: typer.Context,
        cycle_id: str = typer.Argument(..., help="Cycle ID"),
    ) -> None:
        """Show one cycle."""
        state = get_state(ctx)
        try:
            cycle = state.client.execute(queries.GET_CYCLE, {"id": cycle_id})
            if cycle is None:
                raise CycleNotFoundError(cycle_id)
        except LinctlError as e:
            fail(state, e)

        state.renderer.render_single(
            cycle,
            partial(format_cycle_detail, state.renderer),
        )

    app.add_typer(cycle_app, name="cycle")
