"""Configuration management for mcp-codex-cli."""

from __future__ import annotations

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from mcp_codex_cli.arguments import InvocationDefaults
from mcp_codex_cli.executor import DEFAULT_COMMAND_TIMEOUT_SECONDS


class Settings(BaseSettings):
    """Application settings."""

    model_config = SettingsConfigDict(
        env_prefix="MCP_CODEX_",
        case_sensitive=False,
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Codex CLI
    codex_command: str = Field(default="codex", description="Executable name or path of the Codex CLI")
    timeout_seconds: float = Field(
        default=DEFAULT_COMMAND_TIMEOUT_SECONDS,
        gt=0,
        description="Timeout for one Codex CLI invocation in seconds",
    )

    # Request defaults
    sandbox_default: bool = Field(
        default=True,
        description="Request the workspace-write sandbox when a call does not say otherwise",
    )

    # Logging
    log_level: str = Field(default="INFO", description="Log level")

    def invocation_defaults(self) -> InvocationDefaults:
        return InvocationDefaults(sandbox=self.sandbox_default)


def get_settings(**overrides: object) -> Settings:
    """Get application settings.

    Args:
        overrides: Explicit values that win over environment and .env entries.

    Returns:
        Settings instance
    """
    values = {key: value for key, value in overrides.items() if value is not None}
    return Settings(**values)  # type: ignore[arg-type]
