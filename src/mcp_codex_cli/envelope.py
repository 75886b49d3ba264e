"""Uniform text result envelope returned by every tool call."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Literal


@dataclass(frozen=True)
class TextBlock:
    text: str
    type: Literal["text"] = "text"

    def to_dict(self) -> dict[str, str]:
        return {"type": self.type, "text": self.text}


@dataclass(frozen=True)
class ToolEnvelope:
    """Result of one tool call: exactly one text block.

    Failures use the same shape as successes; the text carries the error message.
    """

    block: TextBlock
    is_error: bool = False

    @classmethod
    def text_result(cls, text: str) -> ToolEnvelope:
        return cls(TextBlock(text=text))

    @classmethod
    def error(cls, message: str) -> ToolEnvelope:
        return cls(TextBlock(text=message), is_error=True)

    @property
    def text(self) -> str:
        return self.block.text

    @property
    def content(self) -> list[TextBlock]:
        return [self.block]

    def to_dict(self) -> dict[str, Any]:
        return {"content": [self.block.to_dict()]}
