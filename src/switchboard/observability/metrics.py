"""Prometheus metrics for routing decisions, backend requests and token usage."""

import logging
from importlib import metadata

from prometheus_client import CollectorRegistry, Counter, Info, generate_latest

logger = logging.getLogger(__name__)


class MetricsCollector:
    """Prometheus metrics collector for Switchboard.

    Each collector owns its CollectorRegistry so several engines (and test
    cases) can coexist in one process.
    """

    def __init__(self, service_name: str = "switchboard", registry: CollectorRegistry | None = None) -> None:
        self.service_name = service_name
        self.registry = registry or CollectorRegistry()
        self._init_standard_metrics()
        logger.debug("MetricsCollector initialized for %s", service_name)

    def _init_standard_metrics(self) -> None:
        service_info = Info("switchboard_service", "Service information", registry=self.registry)
        try:
            _version = metadata.version("switchboard")
        except metadata.PackageNotFoundError:
            _version = "0.0.0-dev"
        service_info.info({"service": self.service_name, "version": _version})

        self.routing_decisions_total = Counter(
            "switchboard_routing_decisions_total",
            "Routing decisions by chosen backend and task type",
            ["agent", "task_type"],
            registry=self.registry,
        )
        self.generation_requests_total = Counter(
            "switchboard_generation_requests_total",
            "Generation requests dispatched to a backend",
            ["agent", "operation"],
            registry=self.registry,
        )
        self.tokens_total = Counter(
            "switchboard_tokens_total",
            "Tokens reported by backends",
            ["agent", "type"],
            registry=self.registry,
        )

    def record_decision(self, agent: str, task_type: str) -> None:
        self.routing_decisions_total.labels(agent=agent, task_type=task_type).inc()

    def record_request(self, agent: str, operation: str) -> None:
        self.generation_requests_total.labels(agent=agent, operation=operation).inc()

    def record_tokens(self, agent: str, input_tokens: int, output_tokens: int) -> None:
        self.tokens_total.labels(agent=agent, type="input").inc(input_tokens)
        self.tokens_total.labels(agent=agent, type="output").inc(output_tokens)

    def export(self) -> bytes:
        """Prometheus text exposition of this collector's registry"""
        return generate_latest(self.registry)
