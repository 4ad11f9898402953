"""Tool registry and the built-in shell tool."""

from __future__ import annotations

import os
import subprocess
import threading
from abc import ABC, abstractmethod
from typing import Any


class ToolError(Exception):
    """Raised for registry problems and invalid tool invocations."""


class ToolChannel(ABC):
    """A tool that can be invoked by name with a mapping of arguments."""

    @property
    @abstractmethod
    def name(self) -> str:
        """The tool's identifier."""

    @abstractmethod
    def exec(self, args: dict[str, Any], timeout: float | None = None) -> dict[str, Any]:
        """Run the tool and return its result mapping."""


class Registry:
    """Thread-safe mapping of tool names to tools."""

    def __init__(self) -> None:
        self._lock = threading.RLock()
        self._tools: dict[str, ToolChannel] = {}

    def register(self, tool: ToolChannel | None) -> None:
        if tool is None:
            raise ToolError("tool cannot be nil")
        name = tool.name
        if not name:
            raise ToolError("tool name cannot be empty")
        with self._lock:
            if name in self._tools:
                raise ToolError(f"tool {name} already registered")
            self._tools[name] = tool

    def get(self, name: str) -> ToolChannel:
        with self._lock:
            try:
                return self._tools[name]
            except KeyError:
                raise ToolError(f"tool {name} not found") from None

    def get_all(self) -> dict[str, ToolChannel]:
        """Return a copy of the registered tools."""
        with self._lock:
            return dict(self._tools)

    def clear(self) -> None:
        with self._lock:
            self._tools = {}


def _decode(data: bytes | str | None) -> str:
    if data is None:
        return ""
    if isinstance(data, str):
        return data
    return data.decode("utf-8", errors="replace")


class ShellTool(ToolChannel):
    """Runs a command through ``sh -c``."""

    @property
    def name(self) -> str:
        return "shell"

    def exec(self, args: dict[str, Any], timeout: float | None = None) -> dict[str, Any]:
        if "cmd" not in args:
            raise ToolError("missing required argument: cmd")
        cmd = args["cmd"]
        if not isinstance(cmd, str):
            raise ToolError("cmd argument must be a string")
        if not cmd:
            raise ToolError("cmd argument cannot be empty")

        cwd = args.get("cwd")
        if not isinstance(cwd, str):
            cwd = ""
        if cwd and not os.path.exists(cwd):
            raise ToolError(f"working directory does not exist: {cwd}")

        try:
            completed = subprocess.run(
                ["sh", "-c", cmd],
                cwd=cwd or None,
                capture_output=True,
                timeout=timeout,
                check=False,
            )
        except subprocess.TimeoutExpired as exc:
            return {
                "stdout": _decode(exc.stdout),
                "stderr": _decode(exc.stderr),
                "exit_code": -1,
                "cwd": cwd,
            }
        except OSError as exc:
            raise ToolError(f"failed to execute command: {exc}") from exc

        exit_code = completed.returncode if completed.returncode >= 0 else -1
        return {
            "stdout": _decode(completed.stdout),
            "stderr": _decode(completed.stderr),
            "exit_code": exit_code,
            "cwd": cwd,
        }


_global_registry = Registry()
_global_registry.register(ShellTool())


def global_registry() -> Registry:
    """Return the process-wide registry, which starts with the shell tool."""
    return _global_registry


def register(tool: ToolChannel | None) -> None:
    _global_registry.register(tool)


def get(name: str) -> ToolChannel:
    return _global_registry.get(name)


def get_all() -> dict[str, ToolChannel]:
    return _global_registry.get_all()