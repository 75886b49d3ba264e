"""mcp-codex-cli - MCP server for the Codex CLI."""

__version__ = "0.1.0"

__all__ = ["__version__"]
