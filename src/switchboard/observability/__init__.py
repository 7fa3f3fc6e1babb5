"""
Observability Package
=====================

Prometheus metrics for routing decisions, backend requests and token usage.
Structured JSON logging lives in switchboard.core.structured_logger.
"""

from switchboard.observability.metrics import MetricsCollector

__all__ = ["MetricsCollector"]
