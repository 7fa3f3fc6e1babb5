"""
Tests for the switchboard CLI (click.testing.CliRunner)
"""

import json
from unittest.mock import MagicMock

import pytest
from click.testing import CliRunner

from switchboard import cli as cli_module
from switchboard.cli import cli
from switchboard.observability.metrics import MetricsCollector
from switchboard.routing.backend_registry import BackendRegistry
from switchboard.routing.execution_engine import ExecutionEngine


@pytest.fixture(autouse=True)
def quiet_logging(monkeypatch):
    monkeypatch.setattr(cli_module, "configure_logging", MagicMock())


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture
def stub_engine(monkeypatch, make_stub):
    """Replace backend construction with stubs that echo their agent id."""
    registry = BackendRegistry()
    for agent in ("claude", "gemini", "openai"):
        registry.register_instance(agent, make_stub(agent, fragments=[agent, "-", "out"]))

    def build(settings):
        return ExecutionEngine(
            backends=registry,
            metrics=MetricsCollector(),
            default_chat_agent=settings.backends.default_chat_agent,
        )

    monkeypatch.setattr(cli_module, "_build_engine", build)
    return registry


class TestRouteCommand:
    def test_route_works_without_credentials(self, runner, no_credentials):
        result = runner.invoke(cli, ["route", "--type", "chat", "hello"])

        assert result.exit_code == 0, result.output
        assert json.loads(result.output) == {
            "agent": "openai",
            "reasoning": "Optimized for natural conversational flow",
            "confidence": 0.9,
        }

    def test_route_budget_template_customization(self, runner):
        result = runner.invoke(cli, ["route", "--type", "template-customization", "--budget", "Recolor the hero"])
        assert json.loads(result.output)["agent"] == "gemini"

    def test_route_defaults_to_code_generation(self, runner):
        result = runner.invoke(cli, ["route", "Build a landing page"])
        assert json.loads(result.output)["confidence"] == 0.95

    def test_route_with_preference(self, runner):
        result = runner.invoke(cli, ["route", "--agent", "gemini", "hi"])
        assert json.loads(result.output)["reasoning"] == "User preference"

    def test_empty_prompt_fails(self, runner):
        result = runner.invoke(cli, ["route", ""])
        assert result.exit_code == 1
        assert "Invalid input provided" in result.output

    def test_unknown_agent_fails(self, runner):
        result = runner.invoke(cli, ["route", "--agent", "mistral", "hi"])
        assert result.exit_code == 1
        assert "Unknown preferred agent: mistral" in result.output


def test_agents_lists_capabilities(runner):
    result = runner.invoke(cli, ["agents"])

    assert result.exit_code == 0
    payload = json.loads(result.output)
    assert set(payload) == {"claude", "gemini", "openai"}
    assert payload["gemini"]["context_window"] == 1_000_000


class TestGenerateCommand:
    def test_generate_prints_content_and_decision(self, runner, stub_engine):
        result = runner.invoke(cli, ["generate", "Build a landing page"])

        assert result.exit_code == 0, result.output
        assert "claude-out" in result.output
        assert "[claude] Superior code generation quality (0.95)" in result.output

    def test_generate_stream(self, runner, stub_engine):
        result = runner.invoke(cli, ["generate", "--stream", "--type", "chat", "hi"])

        assert result.exit_code == 0, result.output
        assert "openai-out" in result.output
        assert stub_engine.get("openai").calls == [("stream_generate", "hi")]

    def test_missing_credential_reported(self, runner, no_credentials):
        result = runner.invoke(cli, ["generate", "Build a landing page"])

        assert result.exit_code == 1
        assert "ANTHROPIC_API_KEY is not configured" in result.output


class TestChatCommand:
    def test_chat_uses_conversational_default(self, runner, stub_engine):
        result = runner.invoke(cli, ["chat", "hello"])

        assert result.exit_code == 0, result.output
        assert "openai-out" in result.output

    def test_chat_stream_with_system_and_agent(self, runner, stub_engine):
        result = runner.invoke(cli, ["chat", "--stream", "--agent", "claude", "--system", "Be brief", "hello"])

        assert result.exit_code == 0, result.output
        assert "claude-out" in result.output
        assert stub_engine.get("claude").calls == [("stream_chat", "Be brief")]

    def test_config_file_sets_default_chat_agent(self, runner, stub_engine, tmp_path):
        config = tmp_path / "switchboard.yaml"
        config.write_text("backends:\n  default_chat_agent: gemini\n")

        result = runner.invoke(cli, ["--config", str(config), "chat", "hello"])

        assert result.exit_code == 0, result.output
        assert "gemini-out" in result.output
