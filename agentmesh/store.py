"""File-backed persistence of agent state, one JSON file per agent."""

from __future__ import annotations

import json
import re
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Any

_PREFIX = "STATUS_"
_SUFFIX = ".json"
_TIMESTAMP_RE = re.compile(
    r"^(\d{4}-\d{2}-\d{2}T\d{2}:\d{2}:\d{2})(?:\.(\d+))?(Z|[+-]\d{2}:\d{2})$"
)


class StateError(Exception):
    """Raised when state cannot be saved, read or found."""


def _format_time(ts: datetime) -> str:
    if ts.tzinfo is None:
        ts = ts.replace(tzinfo=timezone.utc)
    text = ts.strftime("%Y-%m-%dT%H:%M:%S")
    if ts.microsecond:
        text += "." + f"{ts.microsecond:06d}".rstrip("0")
    offset = ts.utcoffset() or timedelta(0)
    if offset == timedelta(0):
        return text + "Z"
    sign = "+" if offset > timedelta(0) else "-"
    minutes = abs(int(offset.total_seconds())) // 60
    return f"{text}{sign}{minutes // 60:02d}:{minutes % 60:02d}"


def _parse_time(value: Any) -> datetime | None:
    if value is None:
        return None
    if not isinstance(value, str):
        raise ValueError(f"timestamp must be a string, got {type(value).__name__}")
    match = _TIMESTAMP_RE.match(value)
    if not match:
        raise ValueError(f"invalid timestamp: {value!r}")
    base, fraction, zone = match.groups()
    fraction = (fraction or "")[:6].ljust(6, "0")
    zone = "+00:00" if zone == "Z" else zone
    parsed = datetime.fromisoformat(f"{base}.{fraction}{zone}")
    if parsed == datetime(1, 1, 1, tzinfo=timezone.utc):
        return None
    return parsed


def _json_default(value: Any) -> Any:
    if isinstance(value, datetime):
        return _format_time(value)
    if isinstance(value, (set, frozenset)):
        return list(value)
    raise TypeError(f"object of type {type(value).__name__} is not JSON serializable")


def _dumps(value: Any) -> str:
    return json.dumps(value, indent=2, default=_json_default)


@dataclass
class AgentState:
    """The persisted state of one agent."""

    state: str
    last_timestamp: datetime | None
    context_snapshot: dict[str, Any] = field(default_factory=dict)
    data: dict[str, Any] | None = None

    def to_dict(self) -> dict[str, Any]:
        document: dict[str, Any] = {
            "state": self.state,
            "last_timestamp": (
                _format_time(self.last_timestamp)
                if self.last_timestamp is not None
                else "0001-01-01T00:00:00Z"
            ),
            "context_snapshot": self.context_snapshot,
        }
        if self.data:
            document["data"] = self.data
        return document

    @classmethod
    def from_dict(cls, document: Any) -> AgentState:
        if not isinstance(document, dict):
            raise ValueError("expected a JSON object")
        state = document.get("state") or ""
        if not isinstance(state, str):
            raise ValueError("state must be a string")
        snapshot = document.get("context_snapshot") or {}
        data = document.get("data")
        if not isinstance(snapshot, dict):
            raise ValueError("context_snapshot must be an object")
        if data is not None and not isinstance(data, dict):
            raise ValueError("data must be an object")
        return cls(
            state=state,
            last_timestamp=_parse_time(document.get("last_timestamp")),
            context_snapshot=snapshot,
            data=data,
        )


class Store:
    """Persists agent state as ``STATUS_<id>.json`` files in a directory."""

    def __init__(self, base_dir: str | Path) -> None:
        self.base_dir = Path(base_dir)
        try:
            self.base_dir.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise StateError(
                f"failed to create state directory {self.base_dir}: {exc}"
            ) from exc

    def _path(self, key: str) -> Path:
        return self.base_dir / f"{_PREFIX}{key}{_SUFFIX}"

    def _write(self, key: str, value: Any, what: str) -> None:
        try:
            text = _dumps(value)
        except (TypeError, ValueError) as exc:
            raise StateError(f"failed to marshal state for {what}: {exc}") from exc
        try:
            self._path(key).write_text(text, encoding="utf-8")
        except OSError as exc:
            raise StateError(f"failed to write state file for {what}: {exc}") from exc

    def _read(self, key: str, what: str) -> Any:
        path = self._path(key)
        if not path.exists():
            return None
        try:
            text = path.read_text(encoding="utf-8")
        except OSError as exc:
            raise StateError(f"failed to read state file for {what}: {exc}") from exc
        try:
            return json.loads(text)
        except ValueError as exc:
            raise StateError(f"failed to unmarshal state for {what}: {exc}") from exc

    def _read_state(self, agent_id: str) -> AgentState | None:
        document = self._read(agent_id, f"agent {agent_id}")
        if document is None:
            return None
        try:
            return AgentState.from_dict(document)
        except ValueError as exc:
            raise StateError(
                f"failed to unmarshal state for agent {agent_id}: {exc}"
            ) from exc

    def save_state(
        self, agent_id: str, state: str, data: dict[str, Any] | None = None
    ) -> None:
        """Persist ``state`` and ``data`` for ``agent_id``."""
        if not agent_id:
            raise StateError("agentID cannot be empty")
        if not state:
            raise StateError("state cannot be empty")
        now = datetime.now(timezone.utc)
        agent_state = AgentState(
            state=state,
            last_timestamp=now,
            context_snapshot={"agent_id": agent_id, "saved_at": now, "state": state},
            data=data,
        )
        self._write(agent_id, agent_state.to_dict(), f"agent {agent_id}")

    def load(self, key: str) -> Any:
        """Return the value stored under ``key``, or None if nothing is stored."""
        if not key:
            raise StateError("id cannot be empty")
        return self._read(key, f"id {key}")

    def save(self, key: str, value: Any) -> None:
        """Store any JSON-serialisable ``value`` under ``key``."""
        if not key:
            raise StateError("id cannot be empty")
        self._write(key, value, f"id {key}")

    def load_state(self, agent_id: str) -> tuple[str, dict[str, Any]]:
        """Return ``(state, data)``; an unknown agent gives ``("", {})``."""
        if not agent_id:
            raise StateError("agentID cannot be empty")
        agent_state = self._read_state(agent_id)
        if agent_state is None:
            return "", {}
        data = agent_state.data if agent_state.data is not None else {}
        return agent_state.state, data

    def get_state_info(self, agent_id: str) -> AgentState:
        """Return the full persisted record for ``agent_id``."""
        if not agent_id:
            raise StateError("agentID cannot be empty")
        agent_state = self._read_state(agent_id)
        if agent_state is None:
            raise StateError(f"no state file found for agent {agent_id}")
        return agent_state

    def delete_state(self, agent_id: str) -> None:
        """Remove the state of ``agent_id``; a missing file is not an error."""
        if not agent_id:
            raise StateError("agentID cannot be empty")
        try:
            self._path(agent_id).unlink(missing_ok=True)
        except OSError as exc:
            raise StateError(
                f"failed to delete state file for agent {agent_id}: {exc}"
            ) from exc

    def list_agents(self) -> list[str]:
        """Return the IDs of agents with a state file, in file-name order."""
        try:
            entries = sorted(self.base_dir.iterdir(), key=lambda p: p.name)
        except OSError as exc:
            raise StateError(f"failed to read state directory: {exc}") from exc
        return [
            entry.name[len(_PREFIX) : -len(_SUFFIX)]
            for entry in entries
            if not entry.is_dir()
            and len(entry.name) > len(_PREFIX) + len(_SUFFIX)
            and entry.name.startswith(_PREFIX)
            and entry.name.endswith(_SUFFIX)
        ]


_global_store: Store | None = None


def init_global_store(base_dir: str | Path) -> None:
    """Create the process-wide store in ``base_dir``."""
    global _global_store
    _global_store = Store(base_dir)


def get_global_store() -> Store | None:
    return _global_store


def _require_global() -> Store:
    if _global_store is None:
        raise StateError("global store not initialized")
    return _global_store


def save_state(agent_id: str, state: str, data: dict[str, Any] | None = None) -> None:
    _require_global().save_state(agent_id, state, data)


def load_state(agent_id: str) -> tuple[str, dict[str, Any]]:
    return _require_global().load_state(agent_id)