"""Core switchboard module - shared types, errors, logging and prompts."""

from switchboard.core.exceptions import (
    ConfigurationError,
    ErrorCode,
    ProviderError,
    StreamInterrupted,
    SwitchboardError,
    ValidationError,
)
from switchboard.core.types import (
    AgentId,
    ChatExecution,
    ChatMessage,
    ChatRole,
    Execution,
    GenerationResult,
    RoutingDecision,
    TaskDescriptor,
    TaskType,
    TokenUsage,
)

__all__ = [
    "AgentId",
    "ChatExecution",
    "ChatMessage",
    "ChatRole",
    "ConfigurationError",
    "ErrorCode",
    "Execution",
    "GenerationResult",
    "ProviderError",
    "RoutingDecision",
    "StreamInterrupted",
    "SwitchboardError",
    "TaskDescriptor",
    "TaskType",
    "TokenUsage",
    "ValidationError",
]
