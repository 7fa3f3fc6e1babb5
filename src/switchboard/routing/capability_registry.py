"""
Capability Registry - Static per-backend metadata (strengths, context window, pricing)

Consulted by callers for introspection, e.g. to explain a routing choice in a
UI. The task router does not read it; its thresholds are fixed in the
decision table.
"""

import json
import logging
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path
from types import MappingProxyType

from switchboard.core.exceptions import ValidationError
from switchboard.core.types import TokenUsage

logger = logging.getLogger(__name__)

_DEFAULT_CATALOG = Path(__file__).parent / "default_agents.json"


@dataclass(frozen=True)
class TokenCost:
    """USD per 1000 tokens"""

    input: float
    output: float

    def __post_init__(self) -> None:
        if self.input < 0 or self.output < 0:
            raise ValueError("token costs must be non-negative")


@dataclass(frozen=True)
class AgentCapabilities:
    strengths: frozenset[str]
    context_window: int
    cost_per_1k_tokens: TokenCost

    def __post_init__(self) -> None:
        if self.context_window <= 0:
            raise ValueError("context_window must be positive")

    def to_dict(self) -> dict:
        return {
            "strengths": sorted(self.strengths),
            "context_window": self.context_window,
            "cost_per_1k_tokens": {
                "input": self.cost_per_1k_tokens.input,
                "output": self.cost_per_1k_tokens.output,
            },
        }


class CapabilityRegistry:
    """Registry of backend capabilities, filled once at startup"""

    def __init__(self, catalog_path: Path | None = _DEFAULT_CATALOG) -> None:
        self._agents: dict[str, AgentCapabilities] = {}
        if catalog_path is not None:
            self._load_catalog(Path(catalog_path))

    def _load_catalog(self, json_path: Path) -> None:
        """Load capability catalog from JSON."""
        if not json_path.exists():
            logger.warning("%s not found; starting with empty capability registry", json_path.name)
            return
        with open(json_path) as f:
            entries = json.load(f)
        for entry in entries:
            cost = entry["cost_per_1k_tokens"]
            self.register(
                entry["agent"],
                AgentCapabilities(
                    strengths=frozenset(entry.get("strengths", [])),
                    context_window=entry["context_window"],
                    cost_per_1k_tokens=TokenCost(input=cost["input"], output=cost["output"]),
                ),
            )

    def register(self, agent: str, capabilities: AgentCapabilities) -> None:
        """Register capabilities for a backend id; ids cannot be re-registered"""
        if agent in self._agents:
            raise ValueError(f"Capabilities already registered for agent '{agent}'")
        self._agents[agent] = capabilities
        logger.debug("Registered capabilities for %s", agent)

    def has(self, agent: str) -> bool:
        return agent in self._agents

    def get(self, agent: str) -> AgentCapabilities | None:
        return self._agents.get(agent)

    def get_capabilities(self, agent: str) -> AgentCapabilities:
        capabilities = self._agents.get(agent)
        if capabilities is None:
            raise ValidationError(f"Unknown agent: {agent}", {"agent": agent})
        return capabilities

    def agent_ids(self) -> list[str]:
        return list(self._agents)

    def all(self) -> Mapping[str, AgentCapabilities]:
        return MappingProxyType(self._agents)

    def estimate_cost(self, agent: str, tokens: TokenUsage) -> float:
        """Estimated USD cost of a generation at the agent's list price"""
        cost = self.get_capabilities(agent).cost_per_1k_tokens
        return (tokens.input * cost.input + tokens.output * cost.output) / 1000
