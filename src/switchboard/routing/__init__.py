"""
Switchboard Routing System

1. Task router (task_router.py) - fixed decision table from task metadata
   to a backend id. Pure, never fails.
2. Backends (model_backends.py) - Claude, Gemini and OpenAI adapters behind
   one generate/stream/chat contract, built lazily by backend_registry.py.
3. Execution engine (execution_engine.py) - routes a task and dispatches it.
"""

from switchboard.routing.backend_registry import BackendRegistry, create_default_registry
from switchboard.routing.capability_registry import AgentCapabilities, CapabilityRegistry
from switchboard.routing.execution_engine import ExecutionEngine
from switchboard.routing.model_backends import (
    ClaudeBackend,
    GeminiBackend,
    GenerationBackend,
    OpenAIBackend,
)
from switchboard.routing.task_router import TaskRouter, route

__all__ = [
    "AgentCapabilities",
    "BackendRegistry",
    "CapabilityRegistry",
    "ClaudeBackend",
    "ExecutionEngine",
    "GeminiBackend",
    "GenerationBackend",
    "OpenAIBackend",
    "TaskRouter",
    "create_default_registry",
    "route",
]
