"""Initialization command for linctl CLI."""

from __future__ import annotations

import typer

from linctl.config import Config, get_config_path, save_config
from linctl.errors import LinctlError

from ._helpers import fail, get_state


def register(app: typer.Typer, issue_app: typer.Typer) -> None:
    """Register the init command."""

    @app.command()
    def init(
        ctx: typer.Context,
        api_key: str | None = typer.Option(
            None,
            "--api-key",
            help="API key (prompted for when omitted)",
        ),
        team: str | None = typer.Option(
            None,
            "--team",
            help="Default team key (prompted for when omitted)",
        ),
        force: bool = typer.Option(
            False,
            "--force",
            "-f",
            help="Overwrite an existing config without asking",
        ),
    ) -> None:
        """Write the config file with an API key and default team.

        Create a personal API key under Settings > API in the web app.
        """
        state = get_state(ctx)
        config_path = get_config_path()
        if (
            config_path.exists()
            and not force
            and not typer.confirm(
                f"Config file already exists at {config_path}. Overwrite?",
                default=False,
            )
        ):
            state.renderer.render_message("Aborted")
            raise typer.Exit(0)

        key = api_key or typer.prompt("API key", hide_input=True)
        default_team = team
        if default_team is None:
            default_team = typer.prompt(
                "Default team key (blank for none)",
                default="",
                show_default=False,
            )

        config = Config(
            api_key_value=key.strip(),
            default_team=default_team.strip() or None,
        )
        try:
            written = save_config(config, config_path)
        except (LinctlError, OSError) as e:
            fail(state, e)

        state.renderer.render_message(f"Config saved to {written}")
