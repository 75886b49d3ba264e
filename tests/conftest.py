from __future__ import annotations

import stat
import sys
import textwrap
from collections.abc import Callable
from pathlib import Path

import pytest
from typing import TypeAlias

from mcp_codex_cli.config import Settings

ScriptFactory: TypeAlias = Callable[[str], Path]


@pytest.fixture(autouse=True)
def _isolate_env(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    for name in (
        "MCP_CODEX_CODEX_COMMAND",
        "MCP_CODEX_TIMEOUT_SECONDS",
        "MCP_CODEX_SANDBOX_DEFAULT",
        "MCP_CODEX_LOG_LEVEL",
    ):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.chdir(tmp_path)


@pytest.fixture
def write_script(tmp_path: Path) -> ScriptFactory:
    """Write an executable Python script standing in for the codex binary."""

    def _write(body: str, name: str = "fake-codex") -> Path:
        path = tmp_path / "bin" / name
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(f"#!{sys.executable}\n" + textwrap.dedent(body), encoding="utf-8")
        path.chmod(path.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
        return path

    return _write


@pytest.fixture
def echo_codex(write_script: ScriptFactory) -> Path:
    """A codex stand-in that prints its argv as JSON and exits 0."""
    return write_script(
        """
        import json
        import sys

        print(json.dumps(sys.argv[1:]))
        """
    )


@pytest.fixture
def make_settings() -> Callable[..., Settings]:
    def _make(command: Path | str = "codex", **overrides: object) -> Settings:
        return Settings(_env_file=None, codex_command=str(command), **overrides)  # type: ignore[arg-type]

    return _make
