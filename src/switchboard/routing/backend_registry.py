"""
Backend Registry - Backend ids mapped to lazily constructed adapters

Factories are registered at startup. An adapter is built the first time its
id is requested and then reused; a failed construction is not cached, so a
credential added later is picked up on the next request.
"""

import logging
import threading
from collections.abc import Callable

from switchboard.config.secrets import SecretProvider, create_secret_provider
from switchboard.config.settings import Settings
from switchboard.core.exceptions import ValidationError
from switchboard.core.prompt_manager import PromptManager
from switchboard.core.types import AgentId
from switchboard.routing.model_backends import (
    ClaudeBackend,
    GeminiBackend,
    GenerationBackend,
    OpenAIBackend,
)

logger = logging.getLogger(__name__)

BackendFactory = Callable[[], GenerationBackend]


class BackendRegistry:
    """Runtime map of backend id -> adapter"""

    def __init__(self) -> None:
        self._factories: dict[str, BackendFactory] = {}
        self._instances: dict[str, GenerationBackend] = {}
        self._lock = threading.Lock()

    def register(self, agent: str, factory: BackendFactory) -> None:
        with self._lock:
            if agent in self._factories:
                raise ValueError(f"Backend already registered: {agent}")
            self._factories[agent] = factory
        logger.debug("Registered backend factory: %s", agent)

    def register_instance(self, agent: str, backend: GenerationBackend) -> None:
        """Register an already constructed adapter"""
        self.register(agent, lambda: backend)
        with self._lock:
            self._instances[agent] = backend

    def has(self, agent: str) -> bool:
        return agent in self._factories

    def agent_ids(self) -> list[str]:
        return list(self._factories)

    def is_constructed(self, agent: str) -> bool:
        return agent in self._instances

    def get(self, agent: str) -> GenerationBackend:
        """
        Return the adapter for ``agent``, constructing it on first request.

        Raises:
            ValidationError: No backend is registered for ``agent``
            ConfigurationError: The adapter's credential is missing
        """
        backend = self._instances.get(agent)
        if backend is not None:
            return backend

        with self._lock:
            backend = self._instances.get(agent)
            if backend is None:
                factory = self._factories.get(agent)
                if factory is None:
                    raise ValidationError(
                        f"No backend registered for agent '{agent}'", {"agent": agent}
                    )
                backend = factory()
                self._instances[agent] = backend
                logger.info("Constructed %s backend (model=%s)", agent, backend.model)
        return backend

    async def close(self) -> None:
        """Close every constructed adapter"""
        with self._lock:
            backends = list(self._instances.values())
            self._instances.clear()
        for backend in backends:
            await backend.close()


def create_default_registry(
    settings: Settings | None = None,
    secrets: SecretProvider | None = None,
    prompts: PromptManager | None = None,
) -> BackendRegistry:
    """Registry with the Claude, Gemini and OpenAI backends"""
    settings = settings or Settings()
    secrets = secrets or create_secret_provider(settings.docker_secrets_dir)
    prompts = prompts or PromptManager(
        prompts_dir=settings.prompts.prompts_dir,
        cache_ttl_seconds=settings.prompts.cache_ttl_seconds,
    )
    backends = settings.backends

    registry = BackendRegistry()
    registry.register(
        AgentId.CLAUDE.value,
        lambda: ClaudeBackend(config=backends.claude, prompts=prompts, secrets=secrets),
    )
    registry.register(
        AgentId.GEMINI.value,
        lambda: GeminiBackend(config=backends.gemini, prompts=prompts, secrets=secrets),
    )
    registry.register(
        AgentId.OPENAI.value,
        lambda: OpenAIBackend(config=backends.openai, prompts=prompts, secrets=secrets),
    )
    return registry
