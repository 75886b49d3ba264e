"""Tool registry: listing, argument validation and dispatch."""

from __future__ import annotations

import builtins
import time
from collections.abc import Awaitable, Callable, Mapping
from dataclasses import dataclass
from typing import Any, TypeAlias

from loguru import logger
from pydantic import ValidationError

from mcp_codex_cli.arguments import AnalyzeFileRequest, ChatRequest, InvocationDefaults, InvocationRequest
from mcp_codex_cli.config import Settings
from mcp_codex_cli.envelope import ToolEnvelope
from mcp_codex_cli.errors import InvalidToolArgumentsError, UnknownToolError
from mcp_codex_cli.tools import analyze_file_tool, chat_tool

ToolHandler: TypeAlias = Callable[[Any], Awaitable[ToolEnvelope]]

_REQUIRED_FIELD_ERRORS = frozenset({"missing", "string_type", "string_too_short"})


@dataclass(frozen=True)
class ToolDescriptor:
    """Tool metadata and runtime handle."""

    name: str
    description: str
    input_model: type[InvocationRequest]
    handler: ToolHandler

    def input_schema(self) -> dict[str, Any]:
        schema = self.input_model.model_json_schema(by_alias=True)
        schema.pop("title", None)
        schema.pop("description", None)
        for prop in schema.get("properties", {}).values():
            prop.pop("title", None)
        return schema

    def listing(self) -> dict[str, Any]:
        return {"name": self.name, "description": self.description, "inputSchema": self.input_schema()}


class ToolRegistry:
    """Registry for the tools exposed over MCP."""

    def __init__(self, defaults: InvocationDefaults | None = None) -> None:
        self._tools: dict[str, ToolDescriptor] = {}
        self._defaults = defaults or InvocationDefaults()

    def register(self, descriptor: ToolDescriptor) -> None:
        if descriptor.name in self._tools:
            raise ValueError(f"Duplicate tool name: {descriptor.name}")
        self._tools[descriptor.name] = descriptor

    def has(self, name: str) -> bool:
        return name in self._tools

    def get(self, name: str) -> ToolDescriptor | None:
        return self._tools.get(name)

    def descriptors(self) -> builtins.list[ToolDescriptor]:
        return list(self._tools.values())

    def list_tools(self) -> builtins.list[dict[str, Any]]:
        return [descriptor.listing() for descriptor in self.descriptors()]

    def parse_arguments(self, name: str, arguments: Mapping[str, Any] | None) -> InvocationRequest:
        """Validate raw arguments for a tool into its request model."""
        descriptor = self.get(name)
        if descriptor is None:
            raise UnknownToolError(name)
        try:
            return descriptor.input_model.from_arguments(arguments or {}, self._defaults)
        except ValidationError as exc:
            raise InvalidToolArgumentsError(_describe_validation_error(descriptor, exc)) from exc

    async def call(self, name: str, arguments: Mapping[str, Any] | None = None) -> ToolEnvelope:
        """Run one tool call. Every failure comes back as an error envelope."""
        start = time.monotonic()
        try:
            request = self.parse_arguments(name, arguments)
            envelope = await self._tools[name].handler(request)
        except (UnknownToolError, InvalidToolArgumentsError) as exc:
            logger.info("tool.call.rejected name={} reason={}", name, exc)
            return ToolEnvelope.error(f"Error: {exc}")
        except Exception as exc:
            logger.exception("tool.call.error name={}", name)
            return ToolEnvelope.error(f"Error: {exc}")

        logger.info(
            "tool.call name={} error={} elapsed_ms={}",
            name,
            envelope.is_error,
            int((time.monotonic() - start) * 1000),
        )
        return envelope


def _describe_validation_error(descriptor: ToolDescriptor, exc: ValidationError) -> str:
    properties = descriptor.input_schema().get("properties", {})
    required = {
        field.alias or field_name
        for field_name, field in descriptor.input_model.model_fields.items()
        if field.is_required()
    }
    for error in exc.errors():
        loc = error.get("loc") or ()
        param = str(loc[0]) if loc else ""
        if param in required and error.get("type") in _REQUIRED_FIELD_ERRORS:
            expected = properties.get(param, {}).get("type", "string")
            return f"{descriptor.name} requires a '{param}' parameter of type {expected}"

    details = "; ".join(
        f"{'.'.join(str(part) for part in error.get('loc', ())) or '<root>'}: {error.get('msg')}"
        for error in exc.errors()
    )
    return f"Invalid arguments for {descriptor.name}: {details}"


def build_default_registry(settings: Settings | None = None) -> ToolRegistry:
    """Build the registry with the chat and analyzeFile tools bound to settings."""
    settings = settings or Settings()
    registry = ToolRegistry(settings.invocation_defaults())

    async def _chat(request: ChatRequest) -> ToolEnvelope:
        return await chat_tool(request, settings=settings)

    async def _analyze_file(request: AnalyzeFileRequest) -> ToolEnvelope:
        return await analyze_file_tool(request, settings=settings)

    registry.register(
        ToolDescriptor(
            name="chat",
            description="Engage in a chat conversation with CodeX CLI",
            input_model=ChatRequest,
            handler=_chat,
        )
    )
    registry.register(
        ToolDescriptor(
            name="analyzeFile",
            description="Analyze a file using CodeX CLI",
            input_model=AnalyzeFileRequest,
            handler=_analyze_file,
        )
    )
    return registry
