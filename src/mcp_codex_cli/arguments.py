"""Request models and Codex CLI argument builders."""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import asdict, dataclass
from typing import Any, Literal, Self

from pydantic import BaseModel, ConfigDict, Field

CODEX_EXEC_SUBCOMMAND = "exec"
SKIP_GIT_REPO_CHECK_FLAG = "--skip-git-repo-check"
MODEL_FLAG = "--model"
SANDBOX_FLAG = "--sandbox"
SANDBOX_MODE = "workspace-write"
FULL_AUTO_FLAG = "--full-auto"
CONFIG_FLAG = "-c"

ReasoningEffort = Literal["none", "low", "medium", "high"]
ReasoningSummary = Literal["none", "auto"]

DEFAULT_REASONING_EFFORT: ReasoningEffort = "medium"
DEFAULT_REASONING_SUMMARY: ReasoningSummary = "none"


@dataclass(frozen=True)
class InvocationDefaults:
    """Values applied to any request field the caller leaves out.

    sandbox: ask Codex for the workspace-write sandbox. When disabled the flag is
        omitted and Codex falls back to its own default (read-only).
    yolo: pass --full-auto so Codex applies every action without confirmation.
    reasoning_effort / reasoning_summary: Codex's own defaults; only values that
        differ from these are forwarded as config overrides.
    """

    sandbox: bool = True
    yolo: bool = False
    reasoning_effort: ReasoningEffort = DEFAULT_REASONING_EFFORT
    reasoning_summary: ReasoningSummary = DEFAULT_REASONING_SUMMARY


class InvocationRequest(BaseModel):
    """Fields shared by every Codex request."""

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")

    model: str | None = Field(default=None, description="The model to use (optional, default: gpt-5)")
    sandbox: bool = Field(default=True, description="Run in sandbox mode (optional)")
    yolo: bool = Field(default=False, description="Automatically accept all actions (optional)")
    reasoning_effort: ReasoningEffort = Field(
        default=DEFAULT_REASONING_EFFORT,
        alias="reasoningEffort",
        description="Reasoning effort forwarded to Codex (optional, default: medium)",
    )
    reasoning_summary: ReasoningSummary = Field(
        default=DEFAULT_REASONING_SUMMARY,
        alias="reasoningSummary",
        description="Reasoning summary mode forwarded to Codex (optional, default: none)",
    )

    @classmethod
    def from_arguments(cls, arguments: Mapping[str, Any], defaults: InvocationDefaults | None = None) -> Self:
        """Validate raw tool arguments, filling omitted fields from defaults."""
        defaults = defaults or InvocationDefaults()
        payload = {key: value for key, value in arguments.items() if value is not None}
        for name, value in asdict(defaults).items():
            alias = cls.model_fields[name].alias
            if name not in payload and (alias is None or alias not in payload):
                payload[name] = value
        return cls.model_validate(payload)


class ChatRequest(InvocationRequest):
    """Send a prompt to Codex."""

    prompt: str = Field(..., min_length=1, description="The prompt to send to CodeX CLI")


class AnalyzeFileRequest(InvocationRequest):
    """Ask Codex to analyze a local file."""

    file_path: str = Field(..., min_length=1, alias="filePath", description="Path to the file to analyze")
    prompt: str | None = Field(default=None, description="Optional prompt for analysis")


def build_common_args(request: InvocationRequest) -> list[str]:
    """Build the option tokens shared by every Codex exec call.

    Order is fixed: subcommand, repo-check flag, model, sandbox, full-auto,
    reasoning effort override, reasoning summary override.
    """
    args = [CODEX_EXEC_SUBCOMMAND, SKIP_GIT_REPO_CHECK_FLAG]

    if request.model:
        args.extend([MODEL_FLAG, request.model])

    if request.sandbox:
        args.extend([SANDBOX_FLAG, SANDBOX_MODE])

    if request.yolo:
        args.append(FULL_AUTO_FLAG)

    if request.reasoning_effort != DEFAULT_REASONING_EFFORT:
        args.extend([CONFIG_FLAG, f"model_reasoning_effort={request.reasoning_effort}"])

    if request.reasoning_summary != DEFAULT_REASONING_SUMMARY:
        args.extend([CONFIG_FLAG, f"model_reasoning_summary={request.reasoning_summary}"])

    return args


def build_chat_args(request: ChatRequest) -> list[str]:
    return [*build_common_args(request), request.prompt]


def resolve_file_path(file_path: str, cwd: str | os.PathLike[str] | None = None) -> str:
    """Return the absolute, normalized form of file_path relative to cwd."""
    if cwd is None:
        return os.path.abspath(file_path)
    return os.path.abspath(os.path.join(cwd, file_path))


def compose_analysis_prompt(
    file_path: str,
    prompt: str | None = None,
    *,
    cwd: str | os.PathLike[str] | None = None,
) -> str:
    absolute_path = resolve_file_path(file_path, cwd)
    if prompt:
        return f"{prompt}. Please analyze the file: {absolute_path}"
    return f"Please analyze this file: {absolute_path}"


def build_analyze_file_args(
    request: AnalyzeFileRequest,
    *,
    cwd: str | os.PathLike[str] | None = None,
) -> list[str]:
    return [
        *build_common_args(request),
        compose_analysis_prompt(request.file_path, request.prompt, cwd=cwd),
    ]
