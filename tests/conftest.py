"""Shared pytest fixtures for opcalc tests."""

from collections.abc import Callable
from pathlib import Path

import pytest

from opcalc.core.expression_lang.context import ExecutionContext


@pytest.fixture
def context() -> ExecutionContext:
    """Return a fresh, empty execution context."""
    return ExecutionContext()


@pytest.fixture
def write_config(tmp_path: Path) -> Callable[[str], Path]:
    """Return a helper that writes an opcalc.toml and returns its path."""

    def _write(content: str) -> Path:
        path = tmp_path / "opcalc.toml"
        path.write_text(content, encoding="utf-8")
        return path

    return _write


@pytest.fixture(autouse=True)
def _no_config_env(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    """Keep a developer's OPCALC_CONFIG or ./opcalc.toml out of the tests."""
    monkeypatch.delenv("OPCALC_CONFIG", raising=False)
    monkeypatch.chdir(tmp_path)
