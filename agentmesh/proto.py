"""Message envelope exchanged between agents."""

from __future__ import annotations

import itertools
import json
import re
import threading
import time
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import Any


class MsgType(str, Enum):
    """Kinds of messages agents exchange."""

    TASK = "TASK"
    QUESTION = "QUESTION"  # information request
    ANSWER = "ANSWER"  # information response
    REQUEST = "REQUEST"  # approval request
    RESULT = "RESULT"  # approval response
    ERROR = "ERROR"
    SHUTDOWN = "SHUTDOWN"

    def __str__(self) -> str:
        return self.value


class MessageValidationError(ValueError):
    """Raised when a message is missing a required field or is malformed."""


_id_counter = itertools.count(1)
_id_lock = threading.Lock()


def generate_id() -> str:
    """Return a unique message identifier of the form ``msg_<ns>_<n>``."""
    with _id_lock:
        n = next(_id_counter)
        return f"msg_{time.time_ns()}_{n}"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


_ZERO_TIME = "0001-01-01T00:00:00Z"
_TIMESTAMP_RE = re.compile(
    r"^(\d{4}-\d{2}-\d{2}T\d{2}:\d{2}:\d{2})(?:\.(\d+))?(Z|[+-]\d{2}:\d{2})$"
)


def _format_timestamp(ts: datetime | None) -> str:
    if ts is None:
        return _ZERO_TIME
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


def _parse_timestamp(value: Any) -> datetime | None:
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


def _coerce_type(value: Any) -> MsgType | str:
    if value is None:
        return ""
    if not isinstance(value, str):
        raise ValueError(f"type must be a string, got {type(value).__name__}")
    try:
        return MsgType(value)
    except ValueError:
        return value


@dataclass
class AgentMsg:
    """A message sent from one agent to another."""

    type: MsgType | str
    from_agent: str
    to_agent: str
    id: str = field(default_factory=generate_id)
    timestamp: datetime | None = field(default_factory=_utcnow)
    payload: dict[str, Any] = field(default_factory=dict)
    metadata: dict[str, str] = field(default_factory=dict)
    retry_count: int = 0
    parent_msg_id: str = ""

    def to_json(self) -> str:
        """Serialise the message to a JSON string."""
        msg_type = self.type.value if isinstance(self.type, MsgType) else self.type
        document: dict[str, Any] = {
            "id": self.id,
            "type": msg_type,
            "from_agent": self.from_agent,
            "to_agent": self.to_agent,
            "timestamp": _format_timestamp(self.timestamp),
            "payload": self.payload,
        }
        if self.metadata:
            document["metadata"] = self.metadata
        if self.retry_count:
            document["retry_count"] = self.retry_count
        if self.parent_msg_id:
            document["parent_msg_id"] = self.parent_msg_id
        return json.dumps(document)

    @classmethod
    def from_json(cls, data: str | bytes) -> AgentMsg:
        """Build a message from its JSON form; raises ValueError on bad input."""
        try:
            document = json.loads(data)
            if not isinstance(document, dict):
                raise ValueError("expected a JSON object")
            payload = document.get("payload") or {}
            metadata = document.get("metadata") or {}
            if not isinstance(payload, dict):
                raise ValueError("payload must be an object")
            if not isinstance(metadata, dict) or not all(
                isinstance(v, str) for v in metadata.values()
            ):
                raise ValueError("metadata must be an object of strings")
            retry_count = document.get("retry_count") or 0
            if not isinstance(retry_count, int) or isinstance(retry_count, bool):
                raise ValueError("retry_count must be an integer")
            return cls(
                type=_coerce_type(document.get("type")),
                from_agent=str(document.get("from_agent") or ""),
                to_agent=str(document.get("to_agent") or ""),
                id=str(document.get("id") or ""),
                timestamp=_parse_timestamp(document.get("timestamp")),
                payload=dict(payload),
                metadata=dict(metadata),
                retry_count=retry_count,
                parent_msg_id=str(document.get("parent_msg_id") or ""),
            )
        except ValueError as exc:
            raise ValueError(f"failed to unmarshal AgentMsg: {exc}") from exc

    def set_payload(self, key: str, value: Any) -> None:
        self.payload[key] = value

    def get_payload(self, key: str) -> Any:
        """Return the payload value for ``key``, or None when absent."""
        return self.payload.get(key)

    def set_metadata(self, key: str, value: str) -> None:
        self.metadata[key] = value

    def get_metadata(self, key: str) -> str | None:
        """Return the metadata value for ``key``, or None when absent."""
        return self.metadata.get(key)

    def clone(self) -> AgentMsg:
        """Return a copy whose payload and metadata maps are independent."""
        return AgentMsg(
            type=self.type,
            from_agent=self.from_agent,
            to_agent=self.to_agent,
            id=self.id,
            timestamp=self.timestamp,
            payload=dict(self.payload),
            metadata=dict(self.metadata),
            retry_count=self.retry_count,
            parent_msg_id=self.parent_msg_id,
        )

    def validate(self) -> None:
        """Raise MessageValidationError if a required field is missing or invalid."""
        if not self.id:
            raise MessageValidationError("message ID is required")
        if not self.type:
            raise MessageValidationError("message type is required")
        if not self.from_agent:
            raise MessageValidationError("from_agent is required")
        if not self.to_agent:
            raise MessageValidationError("to_agent is required")
        if self.timestamp is None:
            raise MessageValidationError("timestamp is required")
        if self.type not in {t.value for t in MsgType}:
            raise MessageValidationError(f"invalid message type: {self.type}")


def new_agent_msg(msg_type: MsgType | str, from_agent: str, to_agent: str) -> AgentMsg:
    """Create a fresh message with a new ID and the current UTC time."""
    return AgentMsg(type=msg_type, from_agent=from_agent, to_agent=to_agent)