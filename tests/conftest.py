"""Shared pytest fixtures and test helpers for rommap tests."""

from __future__ import annotations

import logging
from collections.abc import Generator, Iterable, Mapping
from pathlib import Path
from typing import Any

import pytest
from click.testing import CliRunner
from sqlalchemy import Column, ForeignKey, Integer, MetaData, String, Table, create_engine

import rommap
from rommap.environment import Setup
from rommap.telemetry import _current_span, disable_telemetry


@pytest.fixture
def cli_runner() -> CliRunner:
    """Provide a Click CLI test runner."""
    return CliRunner()


@pytest.fixture
def rom_setup() -> Setup:
    """A setup with one in-memory ``default`` gateway."""
    return rommap.setup("memory")


@pytest.fixture
def sqlite_uri(tmp_path: Path) -> Generator[str]:
    """URI of a SQLite file with ``users`` and ``tasks`` tables."""
    path = tmp_path / "app.db"
    uri = f"sqlite:///{path}"
    engine = create_engine(uri)
    metadata = MetaData()
    Table(
        "users",
        metadata,
        Column("id", Integer, primary_key=True),
        Column("name", String, nullable=False, unique=True),
        Column("email", String),
    )
    Table(
        "tasks",
        metadata,
        Column("id", Integer, primary_key=True),
        Column("title", String, nullable=False),
        Column("user", String, ForeignKey("users.name")),
        Column("priority", Integer),
    )
    metadata.create_all(engine)
    engine.dispose()
    yield uri


@pytest.fixture
def _isolated_project(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Change CWD to an empty temp project so config discovery stays local.

    Use via ``@pytest.mark.usefixtures("_isolated_project")``.
    """
    monkeypatch.delenv("ROMMAP_CONFIG", raising=False)
    monkeypatch.chdir(tmp_path)
    return tmp_path


@pytest.fixture
def _telemetry_reset() -> Generator[None]:
    """Leave telemetry disabled and without a current span after the test."""
    yield
    disable_telemetry()
    _current_span.set(None)


@pytest.fixture
def _restore_logging() -> Generator[None]:
    """Undo ``configure_logging`` so later tests keep pytest's log capture."""
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)
    logging.getLogger("rommap").setLevel(logging.NOTSET)


# ---------------------------------------------------------------------------
# Shared test helpers
# ---------------------------------------------------------------------------


def match_array(actual: Iterable[Mapping[str, Any]], expected: Iterable[Mapping[str, Any]]) -> None:
    """Assert both collections hold the same tuples, in any order."""
    left = sorted((dict(t) for t in actual), key=_canonical)
    right = sorted((dict(t) for t in expected), key=_canonical)
    assert left == right


def _canonical(tuple_: dict[str, Any]) -> str:
    return repr(sorted(tuple_.items()))
