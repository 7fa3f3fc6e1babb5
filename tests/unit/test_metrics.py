"""
Tests for switchboard.observability.metrics
"""

from prometheus_client import CollectorRegistry

from switchboard.observability.metrics import MetricsCollector


def _value(collector: MetricsCollector, name: str, labels: dict) -> float | None:
    return collector.registry.get_sample_value(name, labels)


class TestMetricsCollector:
    def test_collectors_are_isolated(self):
        a = MetricsCollector()
        b = MetricsCollector()
        a.record_decision("claude", "code-generation")

        assert _value(a, "switchboard_routing_decisions_total", {"agent": "claude", "task_type": "code-generation"}) == 1
        assert _value(b, "switchboard_routing_decisions_total", {"agent": "claude", "task_type": "code-generation"}) is None

    def test_explicit_registry(self):
        registry = CollectorRegistry()
        collector = MetricsCollector(registry=registry)
        assert collector.registry is registry

    def test_record_request(self):
        collector = MetricsCollector()
        collector.record_request("openai", "stream_chat")
        collector.record_request("openai", "stream_chat")
        assert _value(collector, "switchboard_generation_requests_total", {"agent": "openai", "operation": "stream_chat"}) == 2

    def test_record_tokens(self):
        collector = MetricsCollector()
        collector.record_tokens("gemini", 100, 25)
        collector.record_tokens("gemini", 10, 5)
        assert _value(collector, "switchboard_tokens_total", {"agent": "gemini", "type": "input"}) == 110
        assert _value(collector, "switchboard_tokens_total", {"agent": "gemini", "type": "output"}) == 30

    def test_service_info(self):
        collector = MetricsCollector(service_name="switchboard-test")
        samples = {
            s.labels["service"]
            for metric in collector.registry.collect()
            if metric.name == "switchboard_service"
            for s in metric.samples
        }
        assert samples == {"switchboard-test"}

    def test_export_is_text_exposition(self):
        collector = MetricsCollector()
        collector.record_decision("claude", "documentation")
        output = collector.export().decode()
        assert 'switchboard_routing_decisions_total{agent="claude",task_type="documentation"} 1.0' in output
