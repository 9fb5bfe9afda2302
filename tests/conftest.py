"""Pytest configuration and shared fixtures."""

from collections.abc import Callable
from pathlib import Path
from typing import Any

import pytest
from fake_linear import FakeLinear
from typer.testing import CliRunner

from linctl.cli import app
from linctl.cli._helpers import CliState
from linctl.client import LinearClient


@pytest.fixture
def fake() -> FakeLinear:
    """A fresh fake endpoint."""
    return FakeLinear()


@pytest.fixture
def client(fake: FakeLinear) -> LinearClient:
    """A client wired to the fake endpoint."""
    return LinearClient("test-key", transport=fake.transport)


@pytest.fixture
def config_dir(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Point the config directory at a temporary path and set an API key."""
    path = tmp_path / "config"
    monkeypatch.setenv("LINCTL_CONFIG_DIR", str(path))
    monkeypatch.setenv("LINEAR_API_KEY", "test-key")
    return path


@pytest.fixture
def invoke(fake: FakeLinear, config_dir: Path) -> Callable[..., Any]:
    """Run the CLI against the fake endpoint."""
    runner = CliRunner()

    def run(*args: str, input: str | None = None) -> Any:
        return runner.invoke(
            app,
            list(args),
            obj=CliState(transport=fake.transport),
            input=input,
        )

    return run
