"""Assertions over agent messages, raising AssertionError when a check fails."""

from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from typing import Any

from agentmesh.proto import AgentMsg, MsgType

_log = logging.getLogger(__name__)
_MISSING = object()

_HEALTH_PATTERNS = (
    "HealthResponse",
    "/health",
    "application/json",
    "time.Now()",
    "http.StatusOK",
)
_SOPHISTICATED_PATTERNS = (
    "context.Context",
    "sync.Mutex",
    "error wrapping",
    "detailed logging",
)
_LONG_IMPLEMENTATION = 5000


@dataclass
class LintTestConditions:
    """Whether a lint/test run is expected to pass, and the error text if not."""

    should_pass: bool = False
    error_text: str = ""


def _payload(msg: AgentMsg, key: str) -> Any:
    if key not in msg.payload:
        raise AssertionError(f"Expected payload key '{key}' to exist")
    return msg.payload[key]


def _payload_str(msg: AgentMsg, key: str) -> str:
    value = _payload(msg, key)
    if not isinstance(value, str):
        raise AssertionError(
            f"Expected payload '{key}' to be a string, got {type(value).__name__}"
        )
    return value


def assert_message_type(msg: AgentMsg, expected_type: MsgType | str) -> None:
    if msg.type != expected_type:
        raise AssertionError(f"Expected message type {expected_type}, got {msg.type}")


def assert_message_from_agent(msg: AgentMsg, expected_from_agent: str) -> None:
    if msg.from_agent != expected_from_agent:
        raise AssertionError(
            f"Expected message from {expected_from_agent}, got {msg.from_agent}"
        )


def assert_message_to_agent(msg: AgentMsg, expected_to_agent: str) -> None:
    if msg.to_agent != expected_to_agent:
        raise AssertionError(f"Expected message to {expected_to_agent}, got {msg.to_agent}")


def assert_payload_exists(msg: AgentMsg, key: str) -> Any:
    """Check that ``key`` is in the payload and return its value."""
    return _payload(msg, key)


def assert_payload_value(msg: AgentMsg, key: str, expected_value: Any) -> None:
    value = _payload(msg, key)
    if value != expected_value:
        raise AssertionError(
            f"Expected payload '{key}' to be {expected_value!r}, got {value!r}"
        )


def assert_payload_string(msg: AgentMsg, key: str, expected_value: str) -> str:
    """Check that the payload value is the string ``expected_value`` and return it."""
    value = _payload_str(msg, key)
    if value != expected_value:
        raise AssertionError(
            f"Expected payload '{key}' to be '{expected_value}', got '{value}'"
        )
    return value


def assert_payload_contains(msg: AgentMsg, key: str, expected_text: str) -> str:
    """Check that the payload string contains ``expected_text`` and return it."""
    value = _payload_str(msg, key)
    if expected_text not in value:
        raise AssertionError(
            f"Expected payload '{key}' to contain '{expected_text}', got '{value}'"
        )
    return value


def assert_metadata_exists(msg: AgentMsg, key: str) -> str:
    """Check that ``key`` is in the metadata and return its value."""
    if key not in msg.metadata:
        raise AssertionError(f"Expected metadata key '{key}' to exist")
    return msg.metadata[key]


def assert_metadata_value(msg: AgentMsg, key: str, expected_value: str) -> None:
    value = assert_metadata_exists(msg, key)
    if value != expected_value:
        raise AssertionError(
            f"Expected metadata '{key}' to be '{expected_value}', got '{value}'"
        )


def assert_parent_message(msg: AgentMsg, expected_parent_id: str) -> None:
    if msg.parent_msg_id != expected_parent_id:
        raise AssertionError(
            f"Expected parent message ID '{expected_parent_id}', got '{msg.parent_msg_id}'"
        )


def assert_test_results(msg: AgentMsg, expected_success: bool) -> bool:
    """Check ``test_results.success``, given as a mapping or an object attribute."""
    if "test_results" not in msg.payload:
        raise AssertionError("Expected test_results payload to exist")
    results = msg.payload["test_results"]

    if isinstance(results, Mapping):
        if "success" not in results:
            raise AssertionError("Expected test_results.success to exist")
        success = results["success"]
        if success is None:
            raise AssertionError("Expected test_results.success to be non-nil")
        if not isinstance(success, bool):
            raise AssertionError(
                f"Expected test_results.success to be a bool, got {type(success).__name__}"
            )
    elif results is not None and not isinstance(results, (str, bytes, int, float, Sequence)):
        success = getattr(results, "success", _MISSING)
        if success is _MISSING:
            raise AssertionError("Expected struct to have Success field")
        if not isinstance(success, bool):
            raise AssertionError(
                f"Expected Success field to be bool, got {type(success).__name__}"
            )
    else:
        raise AssertionError(
            f"Expected test_results to be a map or struct, got {type(results).__name__}"
        )

    if success != expected_success:
        raise AssertionError(
            f"Expected test_results.success to be {str(expected_success).lower()}, "
            f"got {str(success).lower()}"
        )
    return success


def assert_code_compiles(msg: AgentMsg) -> str:
    """Check that the implementation looks like Go code; return the implementation."""
    if "implementation" not in msg.payload:
        raise AssertionError("Expected implementation payload to exist")
    impl = msg.payload["implementation"]
    if not isinstance(impl, str):
        raise AssertionError(
            f"Expected implementation to be a string, got {type(impl).__name__}"
        )
    problems = []
    if "package " not in impl:
        problems.append("Implementation should contain package declaration")
    if "func " not in impl:
        problems.append("Implementation should contain at least one function")
    if problems:
        raise AssertionError("; ".join(problems))
    return impl


def assert_health_endpoint_code(msg: AgentMsg) -> None:
    impl = assert_code_compiles(msg)
    missing = [
        f"Expected implementation to contain '{pattern}'"
        for pattern in _HEALTH_PATTERNS
        if pattern not in impl
    ]
    if missing:
        raise AssertionError("; ".join(missing))


def assert_no_api_calls_made(msg: AgentMsg) -> list[str]:
    """Return (and log) warnings suggesting the implementation came from a real API."""
    impl = msg.payload.get("implementation")
    if not isinstance(impl, str):
        return []
    warnings = []
    if len(impl) > _LONG_IMPLEMENTATION:
        warnings.append("Implementation is unusually long, may indicate real API call")
    warnings.extend(
        f"Found sophisticated pattern '{pattern}', may indicate real API call"
        for pattern in _SOPHISTICATED_PATTERNS
        if pattern in impl
    )
    for warning in warnings:
        _log.warning(warning)
    return warnings


def assert_valid_message_flow(
    messages: Sequence[AgentMsg], expected_flow: Sequence[MsgType | str]
) -> None:
    if len(messages) != len(expected_flow):
        raise AssertionError(
            f"Expected {len(expected_flow)} messages in flow, got {len(messages)}"
        )
    mismatches = [
        f"Message {i}: expected type {expected}, got {msg.type}"
        for i, (msg, expected) in enumerate(zip(messages, expected_flow))
        if msg.type != expected
    ]
    if mismatches:
        raise AssertionError("; ".join(mismatches))


def assert_lint_test_conditions(msg: AgentMsg, conditions: LintTestConditions) -> None:
    if conditions.should_pass:
        assert_message_type(msg, MsgType.RESULT)
        assert_test_results(msg, True)
        assert_payload_string(msg, "status", "completed")
    else:
        assert_message_type(msg, MsgType.ERROR)
        assert_payload_exists(msg, "error")
        if conditions.error_text:
            assert_payload_contains(msg, "error", conditions.error_text)