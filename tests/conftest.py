"""
Pytest configuration for all Switchboard tests: validates the environment and
provides deterministic stand-in backends.
"""

import sys
from collections.abc import AsyncGenerator

import pytest

from switchboard.config.settings import AgentBackendConfig
from switchboard.core.types import ChatMessage, GenerationResult, TokenUsage
from switchboard.routing.model_backends import GenerationBackend

CREDENTIAL_ENVS = ("ANTHROPIC_API_KEY", "GOOGLE_AI_API_KEY", "OPENAI_API_KEY")

# =============================================================================
# STUB BACKEND
# =============================================================================


class StubBackend(GenerationBackend):
    """Backend that emits a fixed fragment sequence and records what it saw."""

    name = "Stub"
    provider = "stub"

    def __init__(self, agent_id: str = "stub", fragments: list[str] | None = None, tokens: TokenUsage | None = None):
        super().__init__(AgentBackendConfig(model=f"{agent_id}-model", credential_env="STUB_API_KEY"))
        self.agent_id = agent_id
        self.fragments = fragments if fragments is not None else ["Hello", ", ", "world"]
        self.tokens = tokens or TokenUsage(input=12, output=3)
        self.calls: list[tuple[str, str | None]] = []
        self.emitted = 0
        self.closed = False

    async def _generate(self, prompt: str, system: str) -> GenerationResult:
        self.calls.append(("generate", prompt))
        return GenerationResult(
            content="".join(self.fragments), tokens=self.tokens, model=self.model, finish_reason="stop"
        )

    async def _emit(self) -> AsyncGenerator[str, None]:
        for fragment in self.fragments:
            self.emitted += 1
            yield fragment

    def _stream_generate(self, prompt: str, system: str) -> AsyncGenerator[str, None]:
        self.calls.append(("stream_generate", prompt))
        return self._emit()

    async def _chat(self, system: str | None, turns: list[ChatMessage]) -> str:
        self.calls.append(("chat", system))
        return "".join(self.fragments)

    def _stream_chat(self, system: str | None, turns: list[ChatMessage]) -> AsyncGenerator[str, None]:
        self.calls.append(("stream_chat", system))
        return self._emit()

    async def close(self) -> None:
        self.closed = True


# =============================================================================
# SHARED FIXTURES
# =============================================================================


@pytest.fixture
def no_credentials(monkeypatch):
    """Remove every backend credential from the environment."""
    for name in CREDENTIAL_ENVS:
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def fake_credentials(monkeypatch):
    """Set dummy credentials so eager SDK clients can be constructed offline."""
    monkeypatch.setenv("ANTHROPIC_API_KEY", "test-anthropic-key")
    monkeypatch.setenv("GOOGLE_AI_API_KEY", "test-google-key")
    monkeypatch.setenv("OPENAI_API_KEY", "test-openai-key")


@pytest.fixture
def stub_backend():
    return StubBackend()


@pytest.fixture
def make_stub():
    """Factory for StubBackend instances with custom fragments or agent ids."""
    return StubBackend


# =============================================================================
# PYTEST CONFIGURATION
# =============================================================================


def pytest_configure(config):
    """Fail fast when the package dependencies are not installed."""
    missing = []
    for mod in ("anthropic", "openai", "google.genai", "pydantic_settings", "prometheus_client"):
        try:
            __import__(mod)
        except ImportError:
            missing.append(mod)

    if missing:
        rule = "=" * 70
        print(
            f"\n{rule}\n Missing dependencies: {', '.join(missing)}\n"
            f" Install Switchboard first: pip install -e '.[test]'\n{rule}",
            file=sys.stderr,
        )
        raise SystemExit(1)
