import json
from datetime import datetime, timezone

import pytest

from agentmesh.proto import (
    AgentMsg,
    MessageValidationError,
    MsgType,
    generate_id,
    new_agent_msg,
)


def test_new_agent_msg():
    msg = new_agent_msg(MsgType.TASK, "architect", "claude")
    assert msg.type == MsgType.TASK
    assert msg.from_agent == "architect"
    assert msg.to_agent == "claude"
    assert msg.id.startswith("msg_")
    assert msg.timestamp is not None
    assert msg.timestamp.tzinfo is not None
    assert msg.payload == {}
    assert msg.metadata == {}


def test_to_json_from_json_round_trip():
    original = new_agent_msg(MsgType.TASK, "architect", "claude")
    original.set_payload("story_id", "001")
    original.set_payload("content", "Implement health endpoint")
    original.set_metadata("priority", "high")
    original.retry_count = 1
    original.parent_msg_id = "parent_123"

    restored = AgentMsg.from_json(original.to_json())

    assert restored.id == original.id
    assert restored.type == original.type
    assert restored.from_agent == original.from_agent
    assert restored.to_agent == original.to_agent
    assert restored.retry_count == 1
    assert restored.parent_msg_id == "parent_123"
    assert restored.timestamp == original.timestamp
    assert restored.get_payload("story_id") == "001"
    assert restored.get_payload("content") == "Implement health endpoint"
    assert restored.get_metadata("priority") == "high"


def test_from_json_document():
    json_str = """{
        "id": "msg_123",
        "type": "RESULT",
        "from_agent": "claude",
        "to_agent": "architect",
        "timestamp": "2025-06-09T10:00:00Z",
        "payload": {"status": "success", "code": "fmt.Println(\\"Hello\\")"},
        "metadata": {"duration": "2.5s"},
        "retry_count": 0
    }"""
    msg = AgentMsg.from_json(json_str)
    assert msg.id == "msg_123"
    assert msg.type == MsgType.RESULT
    assert msg.get_payload("status") == "success"
    assert msg.get_metadata("duration") == "2.5s"
    assert msg.timestamp == datetime(2025, 6, 9, 10, 0, 0, tzinfo=timezone.utc)


def test_from_json_accepts_bytes_and_nanoseconds():
    data = (
        b'{"id": "a", "type": "TASK", "from_agent": "x", "to_agent": "y",'
        b' "timestamp": "2025-06-09T10:00:00.123456789Z", "payload": null}'
    )
    msg = AgentMsg.from_json(data)
    assert msg.timestamp == datetime(2025, 6, 9, 10, 0, 0, 123456, tzinfo=timezone.utc)
    assert msg.payload == {}


def test_from_json_invalid():
    with pytest.raises(ValueError, match="failed to unmarshal AgentMsg"):
        AgentMsg.from_json("{not json")
    with pytest.raises(ValueError):
        AgentMsg.from_json("[1, 2]")


def test_to_json_omits_empty_optional_fields():
    msg = new_agent_msg(MsgType.TASK, "a", "b")
    document = json.loads(msg.to_json())
    assert "metadata" not in document
    assert "retry_count" not in document
    assert "parent_msg_id" not in document
    assert document["type"] == "TASK"
    assert document["timestamp"].endswith("Z")


def test_set_get_payload():
    msg = new_agent_msg(MsgType.TASK, "test", "test")
    msg.set_payload("key1", "value1")
    msg.set_payload("key2", 42)
    msg.set_payload("key3", True)
    assert msg.get_payload("key1") == "value1"
    assert msg.get_payload("key2") == 42
    assert msg.get_payload("key3") is True
    assert msg.get_payload("nonexistent") is None
    assert "nonexistent" not in msg.payload


def test_set_get_metadata():
    msg = new_agent_msg(MsgType.TASK, "test", "test")
    msg.set_metadata("env", "production")
    msg.set_metadata("version", "1.0.0")
    assert msg.get_metadata("env") == "production"
    assert msg.get_metadata("version") == "1.0.0"
    assert msg.get_metadata("nonexistent") is None


def test_clone():
    original = new_agent_msg(MsgType.TASK, "architect", "claude")
    original.set_payload("key", "value")
    original.set_metadata("meta", "data")
    original.retry_count = 2
    original.parent_msg_id = "parent_456"

    clone = original.clone()
    assert clone.id == original.id
    assert clone.type == original.type
    assert clone.retry_count == 2
    assert clone.parent_msg_id == "parent_456"
    assert clone.get_payload("key") == "value"
    assert clone.get_metadata("meta") == "data"

    clone.set_payload("key", "modified")
    clone.set_metadata("meta", "changed")
    assert original.get_payload("key") == "value"
    assert original.get_metadata("meta") == "data"


def test_validate_valid_message():
    msg = new_agent_msg(MsgType.TASK, "architect", "claude")
    msg.validate()
    assert msg.type == MsgType.TASK


@pytest.mark.parametrize(
    "attribute, value, message",
    [
        ("id", "", "message ID is required"),
        ("type", "", "message type is required"),
        ("from_agent", "", "from_agent is required"),
        ("to_agent", "", "to_agent is required"),
        ("timestamp", None, "timestamp is required"),
        ("type", "INVALID", "invalid message type: INVALID"),
    ],
)
def test_validate_errors(attribute, value, message):
    msg = new_agent_msg(MsgType.TASK, "architect", "claude")
    setattr(msg, attribute, value)
    with pytest.raises(MessageValidationError, match=message):
        msg.validate()


@pytest.mark.parametrize("value", ["TASK", "RESULT", "ERROR", "QUESTION", "SHUTDOWN"])
def test_msg_type_values(value):
    msg = new_agent_msg(MsgType(value), "a", "b")
    document = json.loads(msg.to_json())
    assert document["type"] == value
    assert AgentMsg.from_json(msg.to_json()).type.value == value


@pytest.mark.parametrize(
    "msg_type",
    [MsgType.TASK, MsgType.RESULT, MsgType.ERROR, MsgType.QUESTION, MsgType.SHUTDOWN],
)
def test_json_round_trip_all_types(msg_type):
    original = new_agent_msg(msg_type, "test_from", "test_to")
    original.set_payload("test_key", "test_value")
    original.set_metadata("test_meta", "test_meta_value")
    data = original.to_json()
    assert isinstance(json.loads(data), dict)
    restored = AgentMsg.from_json(data)
    restored.validate()
    assert restored.type == msg_type


def test_zero_timestamp_round_trips_to_none():
    msg = new_agent_msg(MsgType.TASK, "a", "b")
    msg.timestamp = None
    document = json.loads(msg.to_json())
    assert document["timestamp"] == "0001-01-01T00:00:00Z"
    assert AgentMsg.from_json(msg.to_json()).timestamp is None


def test_generate_id():
    id1 = generate_id()
    id2 = generate_id()
    assert id1 and id2
    assert id1 != id2
    assert id1.startswith("msg_")


def test_example_task_and_result_exchange():
    task = new_agent_msg(MsgType.TASK, "architect", "claude")
    task.set_payload("story_id", "001")
    task.set_payload("content", "Implement health endpoint")
    task.set_payload("requirements", ["GET /health", "return 200 OK", "JSON response"])
    task.set_metadata("priority", "high")
    task.set_metadata("estimated_points", "1")

    task_doc = json.loads(task.to_json())
    assert task_doc["payload"]["requirements"] == ["GET /health", "return 200 OK", "JSON response"]
    assert task_doc["metadata"] == {"priority": "high", "estimated_points": "1"}

    result = new_agent_msg(MsgType.RESULT, "claude", "architect")
    result.parent_msg_id = task.id
    result.set_payload("status", "completed")
    result.set_payload("tests_passed", True)
    result.set_metadata("execution_time", "2.5s")

    result_doc = json.loads(result.to_json())
    assert result_doc["parent_msg_id"] == task.id
    assert result_doc["payload"]["tests_passed"] is True
    assert result_doc["type"] == "RESULT"