"""Tool handlers that proxy requests to the Codex CLI."""

from __future__ import annotations

import os

from loguru import logger

from mcp_codex_cli.arguments import AnalyzeFileRequest, ChatRequest, build_analyze_file_args, build_chat_args
from mcp_codex_cli.config import Settings
from mcp_codex_cli.envelope import ToolEnvelope
from mcp_codex_cli.errors import CommandError
from mcp_codex_cli.executor import execute_command

CODEX_TOOL_NAME = "CodeX CLI"


async def _run_codex(args: list[str], settings: Settings) -> ToolEnvelope:
    try:
        outcome = await execute_command(settings.codex_command, args, timeout=settings.timeout_seconds)
    except CommandError as exc:
        logger.warning("codex.failed error={}", exc)
        return ToolEnvelope.error(f"Error executing {CODEX_TOOL_NAME}: {exc}")
    return ToolEnvelope.text_result(outcome.stdout or outcome.stderr)


async def chat_tool(request: ChatRequest, *, settings: Settings | None = None) -> ToolEnvelope:
    """Send the prompt to `codex exec` and relay its output."""
    settings = settings or Settings()
    logger.info("tool.chat model={} sandbox={} yolo={}", request.model, request.sandbox, request.yolo)
    return await _run_codex(build_chat_args(request), settings)


async def analyze_file_tool(
    request: AnalyzeFileRequest,
    *,
    settings: Settings | None = None,
    cwd: str | os.PathLike[str] | None = None,
) -> ToolEnvelope:
    """Ask `codex exec` to analyze a local file.

    A missing file short-circuits with an error envelope; Codex is not started.
    """
    settings = settings or Settings()
    target = request.file_path if cwd is None else os.path.join(cwd, request.file_path)
    if not os.path.exists(target):
        logger.info("tool.analyze_file.missing path={}", request.file_path)
        return ToolEnvelope.error(f"Error: File not found: {request.file_path}")

    logger.info(
        "tool.analyze_file path={} model={} sandbox={} yolo={}",
        request.file_path,
        request.model,
        request.sandbox,
        request.yolo,
    )
    return await _run_codex(build_analyze_file_args(request, cwd=cwd), settings)
