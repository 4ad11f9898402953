"""Fluent construction of messages, with ready-made messages for common scenarios."""

from __future__ import annotations

from datetime import datetime
from typing import Iterable

from agentmesh.proto import AgentMsg, MsgType, new_agent_msg


class MessageBuilder:
    """Builds an AgentMsg through chained ``with_*`` calls."""

    def __init__(self, msg: AgentMsg) -> None:
        self._msg = msg

    def with_content(self, content: str) -> MessageBuilder:
        self._msg.set_payload("content", content)
        return self

    def with_story_id(self, story_id: str) -> MessageBuilder:
        self._msg.set_payload("story_id", story_id)
        return self

    def with_requirements(self, requirements: Iterable[str]) -> MessageBuilder:
        self._msg.set_payload("requirements", list(requirements))
        return self

    def with_status(self, status: str) -> MessageBuilder:
        self._msg.set_payload("status", status)
        return self

    def with_implementation(self, implementation: str) -> MessageBuilder:
        self._msg.set_payload("implementation", implementation)
        return self

    def with_test_results(self, success: bool, output: str) -> MessageBuilder:
        self._msg.set_payload(
            "test_results", {"success": success, "output": output, "elapsed": "100ms"}
        )
        return self

    def with_error(self, error_msg: str) -> MessageBuilder:
        self._msg.set_payload("error", error_msg)
        return self

    def with_question(self, question: str) -> MessageBuilder:
        self._msg.set_payload("question", question)
        return self

    def with_answer(self, answer: str) -> MessageBuilder:
        self._msg.set_payload("answer", answer)
        return self

    def with_metadata(self, key: str, value: str) -> MessageBuilder:
        self._msg.set_metadata(key, value)
        return self

    def with_parent_message(self, parent_msg: AgentMsg) -> MessageBuilder:
        self._msg.parent_msg_id = parent_msg.id
        return self

    def with_timestamp(self, timestamp: datetime) -> MessageBuilder:
        self._msg.timestamp = timestamp
        return self

    def build(self) -> AgentMsg:
        return self._msg


def new_task_message(from_agent: str, to_agent: str) -> MessageBuilder:
    return MessageBuilder(new_agent_msg(MsgType.TASK, from_agent, to_agent))


def new_result_message(from_agent: str, to_agent: str) -> MessageBuilder:
    return MessageBuilder(new_agent_msg(MsgType.RESULT, from_agent, to_agent))


def new_error_message(from_agent: str, to_agent: str) -> MessageBuilder:
    return MessageBuilder(new_agent_msg(MsgType.ERROR, from_agent, to_agent))


def new_question_message(from_agent: str, to_agent: str) -> MessageBuilder:
    return MessageBuilder(new_agent_msg(MsgType.QUESTION, from_agent, to_agent))


def new_shutdown_message(from_agent: str, to_agent: str) -> MessageBuilder:
    return MessageBuilder(new_agent_msg(MsgType.SHUTDOWN, from_agent, to_agent))


def health_endpoint_task(from_agent: str, to_agent: str) -> AgentMsg:
    """A task asking for a JSON health endpoint."""
    return (
        new_task_message(from_agent, to_agent)
        .with_content("Create a health endpoint that returns JSON with status and timestamp")
        .with_requirements(
            [
                "GET /health endpoint",
                "Return JSON response",
                "Include status field",
                "Include timestamp field",
                "Return 200 status code",
            ]
        )
        .with_metadata("story_type", "health_endpoint")
        .build()
    )


def successful_code_result(from_agent: str, to_agent: str, implementation: str) -> AgentMsg:
    return (
        new_result_message(from_agent, to_agent)
        .with_status("completed")
        .with_implementation(implementation)
        .with_test_results(True, "All checks passed: go fmt, go build completed successfully")
        .with_metadata("agent_type", "coding_agent")
        .build()
    )


def failed_code_result(from_agent: str, to_agent: str, error_msg: str) -> AgentMsg:
    return (
        new_error_message(from_agent, to_agent)
        .with_error(error_msg)
        .with_metadata("error_type", "processing_error")
        .build()
    )


def architect_task_result(from_agent: str, to_agent: str, task_msg_id: str) -> AgentMsg:
    return (
        new_result_message(from_agent, to_agent)
        .with_status("task_created")
        .with_metadata("task_message_id", task_msg_id)
        .with_metadata("target_agent", "claude")
        .build()
    )


def shutdown_acknowledgment(from_agent: str, to_agent: str) -> AgentMsg:
    return (
        new_result_message(from_agent, to_agent)
        .with_status("shutdown_acknowledged")
        .with_metadata("agent_type", "test_agent")
        .build()
    )


def question_about_architecture(from_agent: str, to_agent: str) -> AgentMsg:
    return (
        new_question_message(from_agent, to_agent)
        .with_question("What architecture pattern should I use for this API?")
        .with_metadata("question_type", "architecture")
        .build()
    )


def architecture_answer(from_agent: str, to_agent: str, original_msg: AgentMsg) -> AgentMsg:
    return (
        new_result_message(from_agent, to_agent)
        .with_answer("Follow clean architecture principles with clear separation of concerns.")
        .with_metadata("answer_type", "architect_guidance")
        .with_parent_message(original_msg)
        .build()
    )