"""Tests for output rendering."""

from dataclasses import dataclass
from datetime import datetime, timezone

import orjson
import pytest

from linctl.errors import TransportError
from linctl.models import Priority, Team
from linctl.output import (
    OutputFormat,
    Renderer,
    column,
    format_relative,
    priority_style,
    status_style,
    truncate,
)


@dataclass
class _Row:
    key: str = column("Key")
    name: str = column("Name")


TEAMS = [Team(id="t1", key="ENG", name="Engineering"), Team(id="t2", key="OPS", name="Ops")]


def _row(team: Team) -> _Row:
    return _Row(key=team.key, name=team.name)


def _compact(team: Team) -> str:
    return f"{team.key} | {team.name}"


class TestRenderCollection:
    """Test collection rendering per format."""

    def test_json_is_a_pretty_array_of_records(self, capsys: pytest.CaptureFixture[str]) -> None:
        """JSON mode ignores the projections and dumps to_dict()."""
        Renderer(OutputFormat.JSON).render_collection(TEAMS, _row, _compact)

        out = capsys.readouterr().out
        assert orjson.loads(out) == [t.to_dict() for t in TEAMS]
        assert '\n  {\n    "id"' in out

    def test_json_empty_is_empty_array(self, capsys: pytest.CaptureFixture[str]) -> None:
        """An empty collection is []."""
        Renderer(OutputFormat.JSON).render_collection([], _row, _compact)

        assert orjson.loads(capsys.readouterr().out) == []

    def test_compact_one_line_per_item(self, capsys: pytest.CaptureFixture[str]) -> None:
        """Compact mode prints each projection line."""
        Renderer(OutputFormat.COMPACT).render_collection(TEAMS, _row, _compact)

        assert capsys.readouterr().out == "ENG | Engineering\nOPS | Ops\n"

    def test_table_headers_and_cells(self, capsys: pytest.CaptureFixture[str]) -> None:
        """Table mode renders headers from field metadata."""
        Renderer(OutputFormat.TABLE, color=False).render_collection(TEAMS, _row, _compact)

        out = capsys.readouterr().out
        assert "Key" in out
        assert "Name" in out
        assert "Engineering" in out
        assert "\x1b[" not in out

    def test_table_escapes_markup_in_values(self, capsys: pytest.CaptureFixture[str]) -> None:
        """Square brackets in data are shown literally."""
        renderer = Renderer(OutputFormat.TABLE, color=False)
        team = Team(id="t", key="X", name="[bold]not bold[/bold]")

        renderer.render_collection(
            [team],
            lambda t: _Row(key=t.key, name=renderer.style(t.name, None)),
            _compact,
        )

        assert "[bold]not bold[/bold]" in capsys.readouterr().out


class TestMessages:
    """Test messages and errors."""

    def test_message_plain(self, capsys: pytest.CaptureFixture[str]) -> None:
        """Table mode prints the text."""
        Renderer().render_message("Created ENG-1")

        assert capsys.readouterr().out == "Created ENG-1\n"

    def test_message_json(self, capsys: pytest.CaptureFixture[str]) -> None:
        """JSON mode wraps messages."""
        Renderer(OutputFormat.JSON).render_message("Created ENG-1")

        assert orjson.loads(capsys.readouterr().out) == {"message": "Created ENG-1"}

    def test_quiet_suppresses_messages(self, capsys: pytest.CaptureFixture[str]) -> None:
        """Quiet mode prints nothing for messages."""
        Renderer(quiet=True).render_message("Created ENG-1")

        assert capsys.readouterr().out == ""

    def test_error_goes_to_stderr(self, capsys: pytest.CaptureFixture[str]) -> None:
        """Errors are one line on stderr."""
        Renderer().render_error("boom")

        captured = capsys.readouterr()
        assert captured.out == ""
        assert captured.err == "Error: boom\n"

    def test_error_json(self, capsys: pytest.CaptureFixture[str]) -> None:
        """JSON errors are an object on stderr."""
        Renderer(OutputFormat.JSON).render_error("boom")

        assert orjson.loads(capsys.readouterr().err) == {"error": "boom"}

    def test_verbose_prints_cause_chain(self, capsys: pytest.CaptureFixture[str]) -> None:
        """Verbose reporting walks __cause__."""
        try:
            try:
                msg = "socket closed"
                raise ConnectionError(msg)
            except ConnectionError as e:
                msg = "HTTP request failed"
                raise TransportError(msg) from e
        except TransportError as exc:
            error = exc

        Renderer().report_exception(error, verbose=True)
        err = capsys.readouterr().err
        assert "Error: HTTP request failed" in err
        assert "Caused by: socket closed" in err

        Renderer().report_exception(error, verbose=False)
        assert "Caused by" not in capsys.readouterr().err

    def test_verbose_respects_from_none(self, capsys: pytest.CaptureFixture[str]) -> None:
        """A context suppressed with ``from None`` is not reported."""
        try:
            try:
                int("x")
            except ValueError:
                msg = "Invalid priority 'x'"
                raise TransportError(msg) from None
        except TransportError as exc:
            error = exc

        Renderer().report_exception(error, verbose=True)

        assert capsys.readouterr().err == "Error: Invalid priority 'x'\n"


class TestHelpers:
    """Test formatting helpers."""

    def test_truncate(self) -> None:
        """Long text gets an ellipsis; short text is unchanged."""
        assert truncate("short", 10) == "short"
        assert truncate("a" * 20, 10) == "aaaaaaa..."

    @pytest.mark.parametrize(
        ("seconds", "expected"),
        [
            (10, "just now"),
            (60, "1 min ago"),
            (300, "5 mins ago"),
            (3600, "1 hour ago"),
            (2 * 86400, "2 days ago"),
            (60 * 86400, "2024-01-01"),
        ],
    )
    def test_format_relative(self, seconds: int, expected: str) -> None:
        """Relative times step through units, then fall back to a date."""
        then = datetime(2024, 1, 1, tzinfo=timezone.utc)
        now = datetime.fromtimestamp(then.timestamp() + seconds, tz=timezone.utc)

        assert format_relative("2024-01-01T00:00:00.000Z", now=now) == expected

    def test_status_style(self) -> None:
        """A hex color wins; otherwise the name picks a style."""
        assert status_style("Done", "5e6ad2") == "#5e6ad2"
        assert status_style("Done") == "green"
        assert status_style("In Progress") == "blue"
        assert status_style("Weird") is None

    def test_priority_style(self) -> None:
        """Urgent is bold red; no priority is unstyled."""
        assert priority_style(Priority.URGENT) == "bold red"
        assert priority_style(Priority.NONE) is None
