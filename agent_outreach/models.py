"""
Data models for the ag.dev agent API.

The API speaks camelCase JSON. Each record here is a plain dataclass with a
``from_dict`` constructor for decoding API responses and a ``to_dict`` method
for encoding requests. Run inputs and results are arbitrary JSON objects owned
by the remote agent, so they stay as ``JSONObject`` mappings and are only
checked for being objects at the boundary.
"""

from dataclasses import dataclass, field
from typing import Any, Optional, Union

from .errors import InvalidPayloadError

JSONValue = Union[str, int, float, bool, None, list["JSONValue"], dict[str, "JSONValue"]]
JSONObject = dict[str, JSONValue]


class RunStatus:
    """Agent run status values."""
    PENDING = "pending"
    RUNNING = "running"
    DONE = "done"
    ERROR = "error"


TERMINAL_STATUSES = frozenset({RunStatus.DONE, RunStatus.ERROR})


def ensure_json_object(value: Any, what: str) -> JSONObject:
    """Return ``value`` if it is a JSON object, otherwise raise InvalidPayloadError."""
    if not isinstance(value, dict):
        raise InvalidPayloadError(
            f"Expected {what} to be a JSON object, got {type(value).__name__}"
        )
    return value


def _optional_object(value: Any, what: str) -> Optional[JSONObject]:
    if value is None:
        return None
    return ensure_json_object(value, what)


@dataclass
class AgentTool:
    """An MCP server and the subset of its tools an agent may call."""
    source: str
    server_id: str
    enabled_tools: list[str] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: dict) -> "AgentTool":
        return cls(
            source=data.get("source", ""),
            server_id=data.get("serverId", ""),
            enabled_tools=list(data.get("enabledTools") or []),
        )

    def to_dict(self) -> dict:
        return {
            "source": self.source,
            "serverId": self.server_id,
            "enabledTools": list(self.enabled_tools),
        }


@dataclass
class AgentConfig:
    """Request body for creating an agent."""
    model_stack_id: str
    goal_prompt: str
    input_schema: JSONObject
    tools: list[AgentTool] = field(default_factory=list)
    result_type: str = "text"
    custom_planning_instructions: Optional[str] = None

    def to_dict(self) -> dict:
        body = {
            "modelStackId": self.model_stack_id,
            "goalPrompt": self.goal_prompt,
            "inputSchema": self.input_schema,
            "tools": [tool.to_dict() for tool in self.tools],
            "resultType": self.result_type,
        }
        if self.custom_planning_instructions is not None:
            body["customPlanningInstructions"] = self.custom_planning_instructions
        return body


@dataclass
class AgentUpdate:
    """Partial update for an agent. Only fields that are set are sent."""
    model_stack_id: Optional[str] = None
    goal_prompt: Optional[str] = None
    input_schema: Optional[JSONObject] = None
    tools: Optional[list[AgentTool]] = None
    result_type: Optional[str] = None
    custom_planning_instructions: Optional[str] = None

    def to_dict(self) -> dict:
        body = {
            "modelStackId": self.model_stack_id,
            "goalPrompt": self.goal_prompt,
            "inputSchema": self.input_schema,
            "tools": [tool.to_dict() for tool in self.tools] if self.tools is not None else None,
            "resultType": self.result_type,
            "customPlanningInstructions": self.custom_planning_instructions,
        }
        return {k: v for k, v in body.items() if v is not None}


@dataclass
class AgentDefinition:
    """An agent as stored by ag.dev."""
    id: str
    model_stack_id: str = ""
    goal_prompt: str = ""
    input_schema: JSONObject = field(default_factory=dict)
    tools: list[AgentTool] = field(default_factory=list)
    result_type: str = ""
    custom_planning_instructions: Optional[str] = None
    created_at: Optional[str] = None
    updated_at: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Any) -> "AgentDefinition":
        data = ensure_json_object(data, "agent")
        return cls(
            id=data.get("id", ""),
            model_stack_id=data.get("modelStackId", ""),
            goal_prompt=data.get("goalPrompt", ""),
            input_schema=data.get("inputSchema") or {},
            tools=[AgentTool.from_dict(t) for t in data.get("tools") or []],
            result_type=data.get("resultType", ""),
            custom_planning_instructions=data.get("customPlanningInstructions"),
            created_at=data.get("createdAt"),
            updated_at=data.get("updatedAt"),
        )


@dataclass
class AgentRun:
    """
    A single execution of an agent.

    ``completed_at`` is set once the run is terminal, and ``result_data`` is
    only meaningful when the status is ``done``.
    """
    id: str
    agent_id: str
    status: str
    input: JSONObject = field(default_factory=dict)
    result_data: Optional[JSONObject] = None
    created_at: Optional[str] = None
    updated_at: Optional[str] = None
    completed_at: Optional[str] = None

    @property
    def is_terminal(self) -> bool:
        return self.status in TERMINAL_STATUSES

    @classmethod
    def from_dict(cls, data: Any) -> "AgentRun":
        data = ensure_json_object(data, "agent run")
        return cls(
            id=data.get("id", ""),
            agent_id=data.get("agentId", ""),
            status=data.get("status", RunStatus.PENDING),
            input=_optional_object(data.get("input"), "run input") or {},
            result_data=_optional_object(data.get("resultData"), "run result"),
            created_at=data.get("createdAt"),
            updated_at=data.get("updatedAt"),
            completed_at=data.get("completedAt"),
        )

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "agentId": self.agent_id,
            "status": self.status,
            "input": self.input,
            "resultData": self.result_data,
            "createdAt": self.created_at,
            "updatedAt": self.updated_at,
            "completedAt": self.completed_at,
        }


@dataclass
class AgentRunEvent:
    """A timestamped event emitted while a run executes."""
    id: str
    run_id: str
    type: str
    timestamp: Optional[str] = None
    data: JSONObject = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: Any) -> "AgentRunEvent":
        data = ensure_json_object(data, "run event")
        return cls(
            id=data.get("id", ""),
            run_id=data.get("runId", ""),
            type=data.get("type", ""),
            timestamp=data.get("timestamp"),
            data=data.get("data") or {},
        )


@dataclass
class ListResponse:
    """A page of items returned by a list endpoint."""
    items: list
    total: int = 0
    page: Optional[int] = None
    page_size: Optional[int] = None

    @classmethod
    def from_dict(cls, data: Any, item_type) -> "ListResponse":
        data = ensure_json_object(data, "list response")
        items = [item_type.from_dict(item) for item in data.get("items") or []]
        return cls(
            items=items,
            total=data.get("total", len(items)),
            page=data.get("page"),
            page_size=data.get("pageSize"),
        )


@dataclass
class AgentRunResult:
    """Normalized view of a run handed back to callers of ``Agent``."""
    id: str
    status: str
    input: JSONObject
    result_data: Optional[JSONObject] = None
    created_at: Optional[str] = None
    updated_at: Optional[str] = None
    completed_at: Optional[str] = None

    @classmethod
    def from_run(cls, run: AgentRun) -> "AgentRunResult":
        return cls(
            id=run.id,
            status=run.status,
            input=run.input,
            result_data=run.result_data,
            created_at=run.created_at,
            updated_at=run.updated_at,
            completed_at=run.completed_at,
        )

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "status": self.status,
            "input": self.input,
            "resultData": self.result_data,
            "createdAt": self.created_at,
            "updatedAt": self.updated_at,
            "completedAt": self.completed_at,
        }
