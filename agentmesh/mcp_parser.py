"""Parsing of ``<tool name="...">...</tool>`` invocation tags in model output."""

from __future__ import annotations

import json
import re
from dataclasses import dataclass, field
from typing import Any

_TOOL_TAG = re.compile(r'<tool\s+name="([^"]+)"[^>]*>(.*?)</tool>', re.DOTALL)


@dataclass
class ToolCall:
    """A single parsed tool invocation."""

    name: str
    args: dict[str, Any] = field(default_factory=dict)
    raw_args: str = ""


def _parse_args(raw_args: str) -> dict[str, Any]:
    """Parse a JSON object body, falling back to treating the body as ``cmd``."""
    if not raw_args:
        return {}
    if raw_args.lstrip().startswith("{"):
        try:
            parsed = json.loads(raw_args)
        except ValueError:
            parsed = None
        if isinstance(parsed, dict):
            return parsed
    return {"cmd": raw_args}


class MCPParser:
    """Finds and decodes tool invocation tags in text."""

    def __init__(self) -> None:
        self._pattern = _TOOL_TAG

    def parse_tool_calls(self, text: str) -> list[ToolCall]:
        calls = []
        for match in self._pattern.finditer(text):
            raw_args = match.group(2).strip()
            calls.append(
                ToolCall(name=match.group(1), args=_parse_args(raw_args), raw_args=raw_args)
            )
        return calls

    def has_tool_calls(self, text: str) -> bool:
        return self._pattern.search(text) is not None

    def extract_tool_names(self, text: str) -> list[str]:
        return [match.group(1) for match in self._pattern.finditer(text)]


_default_parser = MCPParser()


def parse_tool_calls(text: str) -> list[ToolCall]:
    return _default_parser.parse_tool_calls(text)


def has_tool_calls(text: str) -> bool:
    return _default_parser.has_tool_calls(text)


def extract_tool_names(text: str) -> list[str]:
    return _default_parser.extract_tool_names(text)