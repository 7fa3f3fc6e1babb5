"""
Task Router - Backend selection from task metadata

A fixed decision table keyed on task type, estimated context size, explicit
preference and cost sensitivity. It has no state, does no I/O and never
fails: unknown task types fall through to the low-confidence default.
"""

import logging
from dataclasses import dataclass

from switchboard.core.types import AgentId, RoutingDecision, TaskDescriptor, TaskType

logger = logging.getLogger(__name__)

# Rough characters-per-token ratio used for context estimation
CHARS_PER_TOKEN = 4

LARGE_GENERATION_CONTEXT = 100_000
LARGE_ANALYSIS_CONTEXT = 50_000


@dataclass(frozen=True)
class RoutingRoles:
    """Which backend plays each role in the decision table"""

    code_specialist: str = AgentId.CLAUDE.value
    long_context: str = AgentId.GEMINI.value
    cost_effective: str = AgentId.GEMINI.value
    conversational: str = AgentId.OPENAI.value


DEFAULT_ROLES = RoutingRoles()


def estimate_context_tokens(task: TaskDescriptor) -> float:
    """Approximate token count of prompt plus context"""
    return (len(task.prompt) + len(task.context or "")) / CHARS_PER_TOKEN


def route(task: TaskDescriptor, roles: RoutingRoles = DEFAULT_ROLES) -> RoutingDecision:
    """
    Route a task to a backend

    Args:
        task: Task descriptor
        roles: Role-to-backend assignment

    Returns:
        RoutingDecision with agent, reasoning and heuristic confidence
    """
    if task.preferred_agent:
        return RoutingDecision(task.preferred_agent, "User preference", 1.0)

    context_size = estimate_context_tokens(task)
    task_type = task.task_type

    if task_type is TaskType.CODE_GENERATION:
        if context_size > LARGE_GENERATION_CONTEXT:
            return RoutingDecision(
                roles.long_context, "Large context window needed for multi-file generation", 0.9
            )
        return RoutingDecision(roles.code_specialist, "Superior code generation quality", 0.95)

    if task_type in (TaskType.REFACTORING, TaskType.DEBUGGING):
        return RoutingDecision(
            roles.code_specialist, "Best at understanding and fixing code issues", 0.9
        )

    if task_type is TaskType.CHAT:
        return RoutingDecision(
            roles.conversational, "Optimized for natural conversational flow", 0.9
        )

    if task_type is TaskType.TEMPLATE_CUSTOMIZATION:
        if task.budget_sensitive:
            return RoutingDecision(
                roles.cost_effective, "Cost-effective for template processing", 0.85
            )
        return RoutingDecision(
            roles.code_specialist, "Higher quality template customization", 0.85
        )

    if task_type is TaskType.ANALYSIS:
        if context_size > LARGE_ANALYSIS_CONTEXT:
            return RoutingDecision(roles.long_context, "Large context analysis capability", 0.9)
        return RoutingDecision(roles.code_specialist, "Detailed analysis and insights", 0.85)

    if task_type is TaskType.DOCUMENTATION:
        return RoutingDecision(
            roles.code_specialist, "Clear and comprehensive documentation generation", 0.9
        )

    return RoutingDecision(roles.code_specialist, "Default routing for general tasks", 0.7)


class TaskRouter:
    """Holds a role assignment and logs each decision"""

    def __init__(self, roles: RoutingRoles = DEFAULT_ROLES) -> None:
        self.roles = roles

    def route(self, task: TaskDescriptor) -> RoutingDecision:
        if not task.is_known_type and not task.preferred_agent:
            logger.warning("Unknown task type '%s', using default routing", task.type)

        decision = route(task, self.roles)
        logger.debug(
            "Routed %s task to %s (confidence=%.2f): %s",
            task.type,
            decision.agent,
            decision.confidence,
            decision.reasoning,
        )
        return decision
