"""Output rendering for linctl: table, JSON, or compact lines."""

from __future__ import annotations

import dataclasses
import sys
from datetime import datetime, timezone
from enum import Enum
from io import StringIO
from typing import TYPE_CHECKING, Any, TypeVar

import orjson
import typer
from rich import box
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from linctl.constants import PRIORITY_STYLES, STATUS_STYLES

if TYPE_CHECKING:
    from collections.abc import Callable, Sequence

    from linctl.models import Priority

T = TypeVar("T")


class OutputFormat(str, Enum):
    """Presentation for every rendering call in one invocation."""

    TABLE = "table"
    JSON = "json"
    COMPACT = "compact"


def column(header: str, **kwargs: Any) -> Any:
    """Declare a table row field with its column header."""
    return dataclasses.field(metadata={"header": header, **kwargs})


def _cause_of(exc: BaseException) -> BaseException | None:
    """Return the explicit cause, or the implicit context unless suppressed."""
    if exc.__cause__ is not None:
        return exc.__cause__
    if exc.__suppress_context__:
        return None
    return exc.__context__


def _to_json_value(item: Any) -> Any:
    if hasattr(item, "to_dict"):
        return item.to_dict()
    if dataclasses.is_dataclass(item) and not isinstance(item, type):
        return dataclasses.asdict(item)
    return item


def dumps_pretty(value: Any) -> str:
    return orjson.dumps(value, option=orjson.OPT_INDENT_2).decode()


class Renderer:
    """Renders records and messages in one fixed format.

    Built once per invocation from the global CLI options and passed to
    every command; the format never changes mid-run.
    """

    def __init__(
        self,
        fmt: OutputFormat = OutputFormat.TABLE,
        quiet: bool = False,
        color: bool | None = None,
    ) -> None:
        self.format = fmt
        self.quiet = quiet
        self.color = sys.stdout.isatty() if color is None else color

    @property
    def is_json(self) -> bool:
        return self.format is OutputFormat.JSON

    def render_collection(
        self,
        items: Sequence[T],
        to_row: Callable[[T], Any],
        to_compact: Callable[[T], str],
    ) -> None:
        """Render a homogeneous collection.

        Args:
            items: Records to render
            to_row: Maps a record to a row dataclass (table mode only)
            to_compact: Maps a record to one line (compact mode only)
        """
        if self.is_json:
            typer.echo(dumps_pretty([_to_json_value(item) for item in items]))
        elif self.format is OutputFormat.COMPACT:
            for item in items:
                typer.echo(to_compact(item))
        elif items:
            typer.echo(self.format_table([to_row(item) for item in items]))

    def render_single(self, item: T, display: Callable[[T], str]) -> None:
        """Render one record, as JSON or through *display*."""
        if self.is_json:
            typer.echo(dumps_pretty(_to_json_value(item)))
        else:
            typer.echo(display(item))

    def render_message(self, text: str) -> None:
        """Print a status message unless quiet."""
        if self.quiet:
            return
        if self.is_json:
            typer.echo(orjson.dumps({"message": text}).decode())
        else:
            typer.echo(text)

    def render_error(self, message: str) -> None:
        """Write an error line to stderr."""
        if self.is_json:
            typer.echo(orjson.dumps({"error": message}).decode(), err=True)
        else:
            typer.echo(f"Error: {message}", err=True)

    def report_exception(self, exc: BaseException, verbose: bool = False) -> None:
        """Report a failure, walking the cause chain when verbose."""
        self.render_error(str(exc))
        if not verbose:
            return
        cause = _cause_of(exc)
        while cause is not None:
            typer.echo(f"Caused by: {cause}", err=True)
            cause = _cause_of(cause)

    def format_table(self, rows: Sequence[Any]) -> str:
        """Format row dataclasses as an aligned table using Rich.

        Headers come from each field's ``header`` metadata.
        """
        table = Table(
            show_header=True,
            header_style="bold",
            box=box.ROUNDED,
            pad_edge=False,
        )
        fields = dataclasses.fields(rows[0])
        for f in fields:
            table.add_column(
                f.metadata.get("header", f.name.title()),
                no_wrap=f.metadata.get("no_wrap", False),
                overflow=f.metadata.get("overflow", "fold"),
            )
        for row in rows:
            table.add_row(*(str(getattr(row, f.name)) for f in fields))

        string_io = StringIO()
        console = Console(
            file=string_io,
            force_terminal=self.color,
            no_color=not self.color,
            width=200,
        )
        console.print(table)
        return string_io.getvalue().rstrip()

    def style(self, text: str, style: str | None) -> str:
        """Wrap escaped *text* in Rich markup for table cells."""
        text = escape(text)
        if not style or not self.color:
            return text
        return f"[{style}]{text}[/]"

    def styled_line(self, text: str, style: str | None) -> str:
        """Return *text* styled for a plain (non-table) line."""
        if not style or not self.color:
            return text
        console = Console(file=StringIO(), force_terminal=True, width=200)
        with console.capture() as capture:
            console.print(f"[{style}]{escape(text)}[/]", end="")
        return capture.get()


def priority_style(priority: Priority) -> str | None:
    return PRIORITY_STYLES.get(int(priority))


def status_style(name: str, color: str | None = None) -> str | None:
    """Pick a style for a status: its hex color, else by name."""
    if color and len(color.lstrip("#")) == 6:
        return f"#{color.lstrip('#')}"
    lower = name.lower()
    for needles, style in STATUS_STYLES:
        if any(needle in lower for needle in needles):
            return style
    return None


def truncate(text: str, width: int) -> str:
    """Shorten *text* to *width* characters with an ellipsis."""
    if len(text) <= width:
        return text
    return text[: max(width - 3, 0)] + "..."


def _parse_iso(value: str) -> datetime | None:
    try:
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def format_date(value: str) -> str:
    """Format an ISO timestamp in local time as ``YYYY-MM-DD HH:MM``."""
    parsed = _parse_iso(value)
    if parsed is None:
        return value.split("T", 1)[0]
    return parsed.astimezone().strftime("%Y-%m-%d %H:%M")


def format_date_only(value: str) -> str:
    parsed = _parse_iso(value)
    if parsed is None:
        return value.split("T", 1)[0]
    return parsed.strftime("%Y-%m-%d")


def format_relative(value: str, now: datetime | None = None) -> str:
    """Format an ISO timestamp relative to now (e.g. "2 days ago")."""
    parsed = _parse_iso(value)
    if parsed is None:
        return value.split("T", 1)[0]
    now = now or datetime.now(timezone.utc)
    seconds = int((now - parsed).total_seconds())

    def plural(n: int, unit: str) -> str:
        return f"{n} {unit}{'' if n == 1 else 's'} ago"

    if seconds < 60:
        return "just now"
    if seconds < 3600:
        return plural(seconds // 60, "min")
    if seconds < 86400:
        return plural(seconds // 3600, "hour")
    if seconds < 30 * 86400:
        return plural(seconds // 86400, "day")
    return format_date_only(value)
