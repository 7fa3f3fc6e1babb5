"""
Core Type Definitions
=====================

Shared value types passed between callers, the router and the backends.

TaskDescriptor and ChatMessage are built by the caller per request.
RoutingDecision and GenerationResult are produced per request and owned by
the caller once returned.
"""

from collections.abc import AsyncIterator, Awaitable, Mapping
from dataclasses import dataclass
from enum import Enum
from typing import Any

from switchboard.core.exceptions import ValidationError


class TaskType(str, Enum):
    """Kinds of text-generation work a caller can request."""

    CODE_GENERATION = "code-generation"
    REFACTORING = "refactoring"
    DEBUGGING = "debugging"
    DOCUMENTATION = "documentation"
    CHAT = "chat"
    ANALYSIS = "analysis"
    TEMPLATE_CUSTOMIZATION = "template-customization"

    def __str__(self) -> str:
        return self.value


class AgentId(str, Enum):
    """Built-in backend identifiers."""

    CLAUDE = "claude"
    GEMINI = "gemini"
    OPENAI = "openai"

    def __str__(self) -> str:
        return self.value


AGENT_IDS = frozenset(a.value for a in AgentId)


class ChatRole(str, Enum):
    USER = "user"
    ASSISTANT = "assistant"
    SYSTEM = "system"

    def __str__(self) -> str:
        return self.value


@dataclass
class TaskDescriptor:
    """
    A request for text generation plus the metadata the router uses.

    ``type`` is kept as a plain string: values outside ``TaskType`` are
    accepted and routed through the default branch. ``preferred_agent`` must
    be one of the built-in backend ids.
    """

    type: str
    prompt: str
    context: str | None = None
    project_type: str | None = None
    preferred_agent: str | None = None
    budget_sensitive: bool = False

    def __post_init__(self) -> None:
        if isinstance(self.type, TaskType):
            self.type = self.type.value
        if isinstance(self.preferred_agent, AgentId):
            self.preferred_agent = self.preferred_agent.value
        if self.preferred_agent is not None and self.preferred_agent not in AGENT_IDS:
            raise ValidationError(
                f"Unknown preferred agent: {self.preferred_agent}", {"preferred_agent": self.preferred_agent}
            )
        if not self.prompt:
            raise ValidationError("Task prompt must not be empty", {"type": self.type})

    @property
    def task_type(self) -> TaskType | None:
        try:
            return TaskType(self.type)
        except ValueError:
            return None

    @property
    def is_known_type(self) -> bool:
        return self.task_type is not None


@dataclass(frozen=True)
class RoutingDecision:
    """Which backend serves a task, why, and how sure the heuristic is."""

    agent: str
    reasoning: str
    confidence: float

    def __post_init__(self) -> None:
        if not 0.0 <= self.confidence <= 1.0:
            raise ValueError(f"confidence must be within [0, 1], got {self.confidence}")

    def to_dict(self) -> dict[str, Any]:
        return {"agent": self.agent, "reasoning": self.reasoning, "confidence": self.confidence}


@dataclass(frozen=True)
class TokenUsage:
    """Token accounting for one generation; ``total`` is always derived."""

    input: int = 0
    output: int = 0

    def __post_init__(self) -> None:
        if self.input < 0 or self.output < 0:
            raise ValueError("token counts must be non-negative")

    @property
    def total(self) -> int:
        return self.input + self.output

    def to_dict(self) -> dict[str, int]:
        return {"input": self.input, "output": self.output, "total": self.total}


@dataclass(frozen=True)
class GenerationResult:
    """Normalized result of a single-shot generation from any backend.

    ``finish_reason`` is whatever stop reason the backend reported and must
    be treated as an opaque string.
    """

    content: str
    tokens: TokenUsage
    model: str
    finish_reason: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "content": self.content,
            "tokens": self.tokens.to_dict(),
            "model": self.model,
            "finishReason": self.finish_reason,
        }


@dataclass(frozen=True)
class ChatMessage:
    role: str
    content: str

    def __post_init__(self) -> None:
        if isinstance(self.role, ChatRole):
            object.__setattr__(self, "role", self.role.value)
        if self.role not in {r.value for r in ChatRole}:
            raise ValidationError(f"Unknown chat role: {self.role}", {"role": self.role})

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "ChatMessage":
        return cls(role=data.get("role", ""), content=data.get("content", ""))

    def to_dict(self) -> dict[str, str]:
        return {"role": self.role, "content": self.content}


def coerce_messages(messages: list["ChatMessage | Mapping[str, Any]"]) -> list[ChatMessage]:
    """Accept ChatMessage instances or role/content mappings."""
    return [m if isinstance(m, ChatMessage) else ChatMessage.from_dict(m) for m in messages]


def split_system_message(messages: list[ChatMessage]) -> tuple[str | None, list[ChatMessage]]:
    """
    Separate the system instruction from the conversation turns.

    The first system message becomes the instruction; every system message
    is dropped from the turns, and the remaining order is preserved.
    """
    system = next((m.content for m in messages if m.role == ChatRole.SYSTEM.value), None)
    turns = [m for m in messages if m.role != ChatRole.SYSTEM.value]
    return system, turns


@dataclass
class Execution:
    """What ``ExecutionEngine.execute`` hands back to the caller.

    ``result`` is an awaitable GenerationResult when ``stream`` is False and
    an async iterator of text fragments otherwise.
    """

    decision: RoutingDecision
    result: "Awaitable[GenerationResult] | AsyncIterator[str]"
    stream: bool = False


@dataclass
class ChatExecution:
    agent: str
    result: "Awaitable[str] | AsyncIterator[str]"
    stream: bool = False
