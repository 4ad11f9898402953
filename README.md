# agentmesh

Building blocks for systems in which several agents hand work to one another.
The package has no dependencies outside the standard library.

- **`agentmesh.proto`**: the `AgentMsg` message envelope and its `MsgType`
  values (`TASK`, `QUESTION`, `ANSWER`, `REQUEST`, `RESULT`, `ERROR`,
  `SHUTDOWN`). It covers JSON encoding and decoding, cloning and validation.
- **`agentmesh.mcp_parser`**: finds `<tool name="...">...</tool>` tags in
  text and turns them into `ToolCall` objects.
- **`agentmesh.tools`**: a thread-safe `Registry` of named tools and a
  `ShellTool` that runs commands through `sh -c`.
- **`agentmesh.store`**: a file-backed `Store` that keeps each agent's state
  in `STATUS_<agent>.json`.
- **`agentmesh.builders`** and **`agentmesh.assertions`**: fluent message
  builders and assertion helpers for tests against agent traffic.

## Installation

```
pip install agentmesh
```

## Messages

```python
from agentmesh.proto import AgentMsg, MsgType, new_agent_msg

task = new_agent_msg(MsgType.TASK, "architect", "coder")
task.set_payload("story_id", "001")
task.set_metadata("priority", "high")

data = task.to_json()
restored = AgentMsg.from_json(data)
restored.validate()  # raises MessageValidationError when a field is missing or invalid
```

`new_agent_msg` assigns an ID of the form `msg_<nanoseconds>_<counter>` (see
`generate_id`) and the current UTC time. `get_payload` and `get_metadata`
return `None` for a missing key. `clone` copies the payload and metadata
dictionaries, so changes to the copy do not reach the original.

In JSON, timestamps are written in RFC 3339 form. `metadata`, `retry_count`
and `parent_msg_id` are left out when they are empty. `AgentMsg.from_json`
raises `ValueError` on malformed input.

## Tool calls

```python
from agentmesh.mcp_parser import parse_tool_calls
from agentmesh.tools import get

for call in parse_tool_calls('<tool name="shell">echo hello</tool>'):
    result = get(call.name).exec(call.args)
    print(result["stdout"], result["exit_code"])
```

The body of a tag is stripped and kept as `raw_args`. If the body is a JSON
object, its keys become the call's `args`. Otherwise the whole body becomes
`args["cmd"]`. `has_tool_calls` and `extract_tool_names` are also available,
both as methods of `MCPParser` and as module-level functions.

Importing `agentmesh.tools` registers a `ShellTool` under the name `shell` in
the global registry. `global_registry()` returns that registry. `register`,
`get` and `get_all` work on it directly. Registry errors and invalid
arguments raise `ToolError`.

`ShellTool.exec(args, timeout=None)` needs a non-empty string `cmd` and takes
an optional `cwd`. It returns `stdout`, `stderr`, `exit_code` and `cwd`. A
non-zero exit status is reported in `exit_code`, not raised. If the timeout
expires, the output captured so far is returned with `exit_code` `-1`.

## State

```python
from agentmesh.store import Store

store = Store("state")
store.save_state("coder-1", "PLANNING", {"step": 1})
state, data = store.load_state("coder-1")   # ("", {}) for an unknown agent
info = store.get_state_info("coder-1")      # AgentState with timestamp and context snapshot
print(store.list_agents())
store.delete_state("coder-1")
```

`Store.save(key, value)` and `Store.load(key)` store and fetch any
JSON-serialisable value. `load` returns `None` when nothing is stored. For a
process-wide store, call `init_global_store(base_dir)` and then use the
module-level `save_state` and `load_state`. Failures raise `StateError`.

## Testing helpers

```python
from agentmesh.assertions import assert_message_type, assert_payload_string
from agentmesh.builders import health_endpoint_task, new_task_message
from agentmesh.proto import MsgType

msg = new_task_message("architect", "coder").with_content("Build it").build()
assert_message_type(msg, MsgType.TASK)
assert_payload_string(msg, "content", "Build it")

task = health_endpoint_task("architect", "coder")
```

Each `assert_*` helper raises `AssertionError` with a descriptive message
when its check fails. `assert_no_api_calls_made` never fails. It returns and
logs warnings for implementations that look like real model output.
`assert_lint_test_conditions` takes a `LintTestConditions(should_pass,
error_text)`.

## What this package does not do

It has no message dispatcher, no agent runtime, no model clients and no
rate limiting. It provides no command-line program. Messages are built,
serialised, parsed and checked here, but delivering them between agents is
left to the application.

## Running the tests

```
pip install agentmesh[test]
pytest
```