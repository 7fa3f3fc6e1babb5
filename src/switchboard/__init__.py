"""Switchboard - task-aware routing over Claude, Gemini and OpenAI text generation."""

from switchboard.core.types import GenerationResult, RoutingDecision, TaskDescriptor, TokenUsage
from switchboard.routing.execution_engine import ExecutionEngine
from switchboard.routing.task_router import route

__all__ = [
    "ExecutionEngine",
    "GenerationResult",
    "RoutingDecision",
    "TaskDescriptor",
    "TokenUsage",
    "route",
]
