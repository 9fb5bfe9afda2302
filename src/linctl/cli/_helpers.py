"""Shared infrastructure for linctl CLI commands."""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, NoReturn

import typer
from typer.core import TyperGroup

from linctl.cache import IdentifierCache
from linctl.client import LinearClient
from linctl.config import Config, get_cache_path, load_config
from linctl.constants import API_ENDPOINT
from linctl.errors import MutationFailedError, ValidationError
from linctl.models import Priority, parse_priority
from linctl.output import Renderer
from linctl.resolve import Resolver

if TYPE_CHECKING:
    from collections.abc import Callable

    import click
    import httpx

    from linctl.models import MutationResult


class SortedGroup(TyperGroup):
    """Typer group that lists commands in alphabetical order."""

    def list_commands(self, ctx: click.Context) -> list[str]:
        """Return commands sorted alphabetically."""
        return sorted(super().list_commands(ctx))


@dataclass
class CliState:
    """Per-invocation state handed to every command through ``ctx.obj``.

    The client, config and resolver are built lazily so commands that never
    touch the network (and ``--help``) need no credential.
    """

    renderer: Renderer = field(default_factory=Renderer)
    verbose: bool = False
    transport: httpx.BaseTransport | None = None
    endpoint: str = API_ENDPOINT
    clock: Callable[[], float] = time.time
    _config: Config | None = None
    _client: LinearClient | None = None
    _resolver: Resolver | None = None

    @property
    def config(self) -> Config:
        if self._config is None:
            self._config = load_config()
        return self._config

    @property
    def client(self) -> LinearClient:
        if self._client is None:
            self._client = LinearClient(
                self.config.api_key(),
                endpoint=self.endpoint,
                transport=self.transport,
            )
        return self._client

    @property
    def resolver(self) -> Resolver:
        if self._resolver is None:
            cache = IdentifierCache.load(get_cache_path(), clock=self.clock)
            self._resolver = Resolver(self.client, cache)
        return self._resolver

    def close(self) -> None:
        if self._client is not None:
            self._client.close()
            self._client = None


def get_state(ctx: typer.Context) -> CliState:
    """Return the invocation state, creating a default one if needed."""
    return ctx.ensure_object(CliState)


def fail(state: CliState, exc: BaseException) -> NoReturn:
    """Report *exc* through the renderer and exit with status 1."""
    state.renderer.report_exception(exc, state.verbose)
    raise typer.Exit(1) from exc


def priority_option(value: str | None) -> Priority | None:
    """Parse a ``--priority`` value.

    Raises:
        ValidationError: If the value is neither 0-4 nor a priority name
    """
    if value is None:
        return None
    try:
        return parse_priority(value)
    except ValueError as e:
        raise ValidationError(str(e)) from None


def require_success(result: MutationResult, action: str) -> MutationResult:
    """Raise if a mutation reported ``success: false``."""
    if not result.success:
        raise MutationFailedError(action)
    return result


def issue_label(result: MutationResult, fallback: str) -> str:
    """Describe a mutated issue as ``ENG-1 - Title`` where possible."""
    identifier = result.identifier or fallback
    return f"{identifier} - {result.title}" if result.title else identifier
