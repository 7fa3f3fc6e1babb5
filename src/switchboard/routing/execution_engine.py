"""
Execution Engine - Single entry point for routing and running generations

Backend errors (ConfigurationError, ProviderError, StreamInterrupted) reach
the caller unchanged. There is no retry and no fallback to another backend.
"""

import logging
from collections.abc import Mapping
from typing import Any

from switchboard.core.structured_logger import get_logger
from switchboard.core.types import (
    ChatExecution,
    ChatMessage,
    Execution,
    GenerationResult,
    RoutingDecision,
    TaskDescriptor,
)
from switchboard.observability.metrics import MetricsCollector
from switchboard.routing.backend_registry import BackendRegistry, create_default_registry
from switchboard.routing.capability_registry import AgentCapabilities, CapabilityRegistry
from switchboard.routing.model_backends import GenerationBackend
from switchboard.routing.task_router import TaskRouter

logger = logging.getLogger(__name__)
structured_logger = get_logger("ExecutionEngine")


class ExecutionEngine:
    """Routes tasks and dispatches them to the chosen backend."""

    def __init__(
        self,
        backends: BackendRegistry | None = None,
        router: TaskRouter | None = None,
        capabilities: CapabilityRegistry | None = None,
        metrics: MetricsCollector | None = None,
        default_chat_agent: str | None = None,
    ):
        self.backends = backends or create_default_registry()
        self.router = router or TaskRouter()
        self.capabilities = capabilities or CapabilityRegistry()
        self.metrics = metrics or MetricsCollector()
        self.default_chat_agent = default_chat_agent or self.router.roles.conversational

        logger.info(
            "ExecutionEngine initialized: backends=%s, default_chat_agent=%s",
            ", ".join(self.backends.agent_ids()),
            self.default_chat_agent,
        )

    def route(self, task: TaskDescriptor) -> RoutingDecision:
        """Choose a backend for the task; never raises"""
        decision = self.router.route(task)
        self.metrics.record_decision(decision.agent, task.type)
        structured_logger.info(
            "Routing decision",
            agent=decision.agent,
            task_type=task.type,
            confidence=decision.confidence,
            reasoning=decision.reasoning,
        )
        return decision

    def get_backend(self, agent: str) -> GenerationBackend:
        return self.backends.get(agent)

    def get_capabilities(self, agent: str) -> AgentCapabilities:
        return self.capabilities.get_capabilities(agent)

    def execute(self, task: TaskDescriptor, stream: bool = False) -> Execution:
        """
        Route a task and start it on the chosen backend.

        Returns:
            Execution whose ``result`` is an awaitable GenerationResult, or an
            async iterator of text fragments when ``stream`` is True.
        """
        decision = self.route(task)
        backend = self.backends.get(decision.agent)

        if stream:
            self.metrics.record_request(decision.agent, "stream_generate")
            return Execution(decision, backend.stream_generate(task.prompt, task.context), stream=True)

        self.metrics.record_request(decision.agent, "generate")
        return Execution(decision, self._generate(backend, decision.agent, task), stream=False)

    async def _generate(self, backend: GenerationBackend, agent: str, task: TaskDescriptor) -> GenerationResult:
        result = await backend.generate(task.prompt, task.context)
        self.metrics.record_tokens(agent, result.tokens.input, result.tokens.output)
        structured_logger.debug(
            "Generation complete",
            agent=agent,
            model=result.model,
            finish_reason=result.finish_reason,
            total_tokens=result.tokens.total,
        )
        return result

    def execute_chat(
        self,
        messages: list[ChatMessage | Mapping[str, Any]],
        preferred_agent: str | None = None,
        stream: bool = False,
    ) -> ChatExecution:
        """
        Run a conversation on the preferred backend, or the conversational
        default. Chat requests do not go through the routing table.
        """
        agent = preferred_agent or self.default_chat_agent
        backend = self.backends.get(agent)
        structured_logger.info("Chat dispatch", agent=agent, messages=len(messages), stream=stream)

        if stream:
            self.metrics.record_request(agent, "stream_chat")
            result: Any = backend.stream_chat(messages)
        else:
            self.metrics.record_request(agent, "chat")
            result = backend.chat(messages)
        return ChatExecution(agent=agent, result=result, stream=stream)

    async def close(self) -> None:
        logger.info("Closing ExecutionEngine backends...")
        await self.backends.close()
