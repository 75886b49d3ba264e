"""mcp-codex-cli command line interface."""

from __future__ import annotations

import asyncio
import json
from typing import Any

import typer

from mcp_codex_cli import __version__
from mcp_codex_cli.config import Settings, get_settings
from mcp_codex_cli.envelope import ToolEnvelope
from mcp_codex_cli.logging_utils import configure_logging
from mcp_codex_cli.registry import build_default_registry
from mcp_codex_cli.server import serve as serve_stdio

app = typer.Typer(name="mcp-codex-cli", help="MCP server for CodeX CLI", add_completion=False)


def _version_callback(value: bool) -> None:
    if value:
        typer.echo(__version__)
        raise typer.Exit()


def _settings(
    codex_command: str | None = None,
    timeout: float | None = None,
    sandbox_default: bool | None = None,
    log_level: str | None = None,
) -> Settings:
    settings = get_settings(
        codex_command=codex_command,
        timeout_seconds=timeout,
        sandbox_default=sandbox_default,
        log_level=log_level,
    )
    configure_logging(settings.log_level)
    return settings


def _emit(envelope: ToolEnvelope) -> None:
    typer.echo(envelope.text)
    if envelope.is_error:
        raise typer.Exit(code=1)


@app.callback(invoke_without_command=True)
def main(
    ctx: typer.Context,
    version: bool = typer.Option(
        False, "--version", callback=_version_callback, is_eager=True, help="Show the version and exit"
    ),
    allow_npx: bool = typer.Option(False, "--allow-npx", help="Accepted for compatibility; has no effect"),
) -> None:
    """Start the stdio MCP server when no command is given."""
    _ = (version, allow_npx)
    if ctx.invoked_subcommand is None:
        serve(codex_command=None, timeout=None, sandbox_default=None, log_level=None)


@app.command()
def serve(
    codex_command: str | None = typer.Option(None, "--codex-command", help="Codex CLI executable"),
    timeout: float | None = typer.Option(None, "--timeout", min=0.001, help="Per-call timeout in seconds"),
    sandbox_default: bool | None = typer.Option(
        None, "--sandbox-default/--no-sandbox-default", help="Default for the sandbox argument"
    ),
    log_level: str | None = typer.Option(None, "--log-level", help="Log level"),
) -> None:
    """Serve the chat and analyzeFile tools over stdio."""
    settings = _settings(codex_command, timeout, sandbox_default, log_level)
    asyncio.run(serve_stdio(build_default_registry(settings)))


def _request_arguments(
    model: str | None,
    sandbox: bool | None,
    yolo: bool,
    reasoning_effort: str | None,
    reasoning_summary: str | None,
) -> dict[str, Any]:
    return {
        "model": model,
        "sandbox": sandbox,
        "yolo": yolo,
        "reasoningEffort": reasoning_effort,
        "reasoningSummary": reasoning_summary,
    }


@app.command()
def chat(
    prompt: str = typer.Argument(..., help="The prompt to send to CodeX CLI"),
    model: str | None = typer.Option(None, "--model", "-m", help="The model to use"),
    sandbox: bool | None = typer.Option(None, "--sandbox/--no-sandbox", help="Run in sandbox mode"),
    yolo: bool = typer.Option(False, "--yolo", help="Automatically accept all actions"),
    reasoning_effort: str | None = typer.Option(None, "--reasoning-effort", help="none, low, medium or high"),
    reasoning_summary: str | None = typer.Option(None, "--reasoning-summary", help="none or auto"),
    codex_command: str | None = typer.Option(None, "--codex-command", help="Codex CLI executable"),
    timeout: float | None = typer.Option(None, "--timeout", min=0.001, help="Timeout in seconds"),
) -> None:
    """Run one chat call and print the result."""
    settings = _settings(codex_command, timeout)
    arguments = {"prompt": prompt, **_request_arguments(model, sandbox, yolo, reasoning_effort, reasoning_summary)}
    registry = build_default_registry(settings)
    _emit(asyncio.run(registry.call("chat", arguments)))


@app.command()
def analyze(
    file_path: str = typer.Argument(..., help="Path to the file to analyze"),
    prompt: str | None = typer.Option(None, "--prompt", "-p", help="Optional prompt for analysis"),
    model: str | None = typer.Option(None, "--model", "-m", help="The model to use"),
    sandbox: bool | None = typer.Option(None, "--sandbox/--no-sandbox", help="Run in sandbox mode"),
    yolo: bool = typer.Option(False, "--yolo", help="Automatically accept all actions"),
    reasoning_effort: str | None = typer.Option(None, "--reasoning-effort", help="none, low, medium or high"),
    reasoning_summary: str | None = typer.Option(None, "--reasoning-summary", help="none or auto"),
    codex_command: str | None = typer.Option(None, "--codex-command", help="Codex CLI executable"),
    timeout: float | None = typer.Option(None, "--timeout", min=0.001, help="Timeout in seconds"),
) -> None:
    """Run one analyzeFile call and print the result."""
    settings = _settings(codex_command, timeout)
    arguments = {
        "filePath": file_path,
        "prompt": prompt,
        **_request_arguments(model, sandbox, yolo, reasoning_effort, reasoning_summary),
    }
    registry = build_default_registry(settings)
    _emit(asyncio.run(registry.call("analyzeFile", arguments)))


@app.command("tools")
def list_tools() -> None:
    """Print the tool listing as JSON."""
    registry = build_default_registry(_settings())
    typer.echo(json.dumps(registry.list_tools(), indent=2))


if __name__ == "__main__":
    app()
