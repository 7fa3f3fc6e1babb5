"""
Switchboard CLI - switchboard route | generate | chat | agents
"""
import asyncio
import json
import sys

import click

from switchboard.config.secrets import create_secret_provider
from switchboard.config.settings import Settings, load_settings
from switchboard.core.exceptions import SwitchboardError
from switchboard.core.structured_logger import TraceContext, configure_logging
from switchboard.core.types import TaskDescriptor, TaskType
from switchboard.routing.backend_registry import create_default_registry
from switchboard.routing.capability_registry import CapabilityRegistry
from switchboard.routing.execution_engine import ExecutionEngine
from switchboard.routing.task_router import TaskRouter

_TASK_TYPES = [t.value for t in TaskType]


def _build_engine(settings: Settings) -> ExecutionEngine:
    secrets = create_secret_provider(settings.docker_secrets_dir)
    return ExecutionEngine(
        backends=create_default_registry(settings, secrets),
        default_chat_agent=settings.backends.default_chat_agent,
    )


def _task_from_options(
    prompt: str, task_type: str, context: str | None, agent: str | None, budget: bool
) -> TaskDescriptor:
    return TaskDescriptor(
        type=task_type,
        prompt=prompt,
        context=context,
        preferred_agent=agent,
        budget_sensitive=budget,
    )


async def _echo_stream(fragments) -> None:
    async for fragment in fragments:
        click.echo(fragment, nl=False)
    click.echo()


def _fail(exc: SwitchboardError) -> None:
    click.echo(f"{exc.user_message()} ({exc.message})", err=True)
    sys.exit(1)


@click.group()
@click.version_option(package_name="switchboard")
@click.option("--config", "config_path", type=click.Path(exists=True, dir_okay=False), default=None, help="YAML config file")
@click.pass_context
def cli(ctx: click.Context, config_path: str | None) -> None:
    """Switchboard: route generation tasks to Claude, Gemini or OpenAI."""
    settings = load_settings(config_path)
    configure_logging(settings.logging.level, settings.logging.format)
    ctx.obj = settings


def task_options(func):
    func = click.option("--budget", is_flag=True, help="Prefer the cost-effective backend where it matters")(func)
    func = click.option("--agent", default=None, help="Preferred backend id (skips the routing table)")(func)
    func = click.option("--context", default=None, help="Additional context sent with the prompt")(func)
    func = click.option(
        "--type", "task_type", default=TaskType.CODE_GENERATION.value, show_default=True,
        help=f"Task type ({', '.join(_TASK_TYPES)})",
    )(func)
    return click.argument("prompt")(func)


@cli.command()
@task_options
def route(prompt: str, task_type: str, context: str | None, agent: str | None, budget: bool) -> None:
    """Show which backend a task would be sent to."""
    try:
        task = _task_from_options(prompt, task_type, context, agent, budget)
    except SwitchboardError as e:
        _fail(e)
    click.echo(json.dumps(TaskRouter().route(task).to_dict(), indent=2))


@cli.command()
@task_options
@click.option("--stream", is_flag=True, help="Print fragments as they arrive")
@click.pass_obj
def generate(
    settings: Settings, prompt: str, task_type: str, context: str | None, agent: str | None, budget: bool, stream: bool
) -> None:
    """Route a task and print the generated text."""

    async def _run() -> None:
        engine = _build_engine(settings)
        try:
            with TraceContext():
                execution = engine.execute(
                    _task_from_options(prompt, task_type, context, agent, budget), stream=stream
                )
                decision = execution.decision
                click.echo(f"[{decision.agent}] {decision.reasoning} ({decision.confidence:.2f})", err=True)
                if stream:
                    await _echo_stream(execution.result)
                else:
                    result = await execution.result
                    click.echo(result.content)
                    click.echo(
                        f"[{result.model}] tokens in={result.tokens.input} out={result.tokens.output} "
                        f"finish={result.finish_reason}",
                        err=True,
                    )
        finally:
            await engine.close()

    try:
        asyncio.run(_run())
    except SwitchboardError as e:
        _fail(e)


@cli.command()
@click.argument("message")
@click.option("--system", default=None, help="System instruction for the conversation")
@click.option("--agent", default=None, help="Backend id (defaults to the conversational backend)")
@click.option("--stream", is_flag=True, help="Print fragments as they arrive")
@click.pass_obj
def chat(settings: Settings, message: str, system: str | None, agent: str | None, stream: bool) -> None:
    """Send a single-turn conversation and print the reply."""
    messages = [{"role": "user", "content": message}]
    if system:
        messages.insert(0, {"role": "system", "content": system})

    async def _run() -> None:
        engine = _build_engine(settings)
        try:
            with TraceContext():
                execution = engine.execute_chat(messages, preferred_agent=agent, stream=stream)
                if stream:
                    await _echo_stream(execution.result)
                else:
                    click.echo(await execution.result)
        finally:
            await engine.close()

    try:
        asyncio.run(_run())
    except SwitchboardError as e:
        _fail(e)


@cli.command()
def agents() -> None:
    """List backend capabilities."""
    registry = CapabilityRegistry()
    payload = {agent: caps.to_dict() for agent, caps in registry.all().items()}
    click.echo(json.dumps(payload, indent=2))


if __name__ == "__main__":
    cli()
