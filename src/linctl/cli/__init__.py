"""linctl CLI commands for the Linear issue tracker."""

from __future__ import annotations

import logging

import typer

from linctl._version import version
from linctl.output import OutputFormat, Renderer

from ._helpers import CliState, SortedGroup

app = typer.Typer(
    help="linctl - a command-line client for Linear",
    no_args_is_help=True,
    cls=SortedGroup,
)
issue_app = typer.Typer(
    help="Work with issues",
    no_args_is_help=True,
    cls=SortedGroup,
)


def _version_callback(value: bool) -> None:
    if value:
        typer.echo(f"linctl {version}")
        raise typer.Exit(0)


@app.callback(invoke_without_command=True)
def _global_options(
    ctx: typer.Context,
    output_format: OutputFormat = typer.Option(
        OutputFormat.TABLE,
        "--format",
        "-o",
        case_sensitive=False,
        help="Output format for all commands",
    ),
    json_output: bool = typer.Option(
        False,
        "--json",
        hidden=True,
        help="Shorthand for --format json",
    ),
    quiet: bool = typer.Option(
        False,
        "--quiet",
        "-q",
        help="Suppress status messages",
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        help="Log requests and show error causes",
    ),
    show_version: bool = typer.Option(
        False,
        "--version",
        callback=_version_callback,
        is_eager=True,
        help="Show the version and exit",
    ),
) -> None:
    state = ctx.ensure_object(CliState)
    state.renderer = Renderer(
        OutputFormat.JSON if json_output else output_format,
        quiet=quiet,
    )
    state.verbose = verbose
    if verbose:
        logging.basicConfig(
            level=logging.DEBUG,
            format="%(levelname)s %(name)s: %(message)s",
        )
    ctx.call_on_close(state.close)

    if ctx.invoked_subcommand is None:
        typer.echo(ctx.get_help())
        raise typer.Exit(0)


from . import (  # noqa: E402
    _cmd_assets,
    _cmd_comments,
    _cmd_cycles,
    _cmd_init,
    _cmd_issues,
    _cmd_relations,
    _cmd_teams,
)

for _mod in (
    _cmd_assets,
    _cmd_comments,
    _cmd_cycles,
    _cmd_init,
    _cmd_issues,
    _cmd_relations,
    _cmd_teams,
):
    _mod.register(app, issue_app)

app.add_typer(issue_app, name="issue")


def main() -> None:
    """Run the linctl CLI application."""
    app()
