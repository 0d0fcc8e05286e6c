"""Tests for the histogram factory."""

import pytest
from prometheus_client import CollectorRegistry, generate_latest

from http_request_durations.metrics import DurationHistogram, create_histogram


def samples(registry: CollectorRegistry, name: str):
    for metric in registry.collect():
        for sample in metric.samples:
            if sample.name == name:
                yield sample


class TestCreateHistogram:
    def test_registers_in_registry(self, registry):
        histogram = create_histogram("latency_seconds", "help", False, None, ("method",), registry)
        histogram.observe(("GET",), 0.2)

        assert isinstance(histogram, DurationHistogram)
        assert registry.get_sample_value("latency_seconds_count", {"method": "GET"}) == 1.0
        assert registry.get_sample_value("latency_seconds_sum", {"method": "GET"}) == pytest.approx(0.2)

    def test_same_schema_returns_cached_handle(self, registry):
        first = create_histogram("latency_seconds", "help", False, None, ("method",), registry)
        second = create_histogram("latency_seconds", "help", False, None, ["method"], registry)
        assert first is second

    def test_different_schema_raises(self, registry):
        create_histogram("latency_seconds", "help", False, None, ("method",), registry)
        with pytest.raises(ValueError, match="already registered"):
            create_histogram("latency_seconds", "help", False, None, ("path",), registry)

    def test_cache_is_per_registry(self, registry):
        other = CollectorRegistry()
        first = create_histogram("latency_seconds", "help", False, None, ("method",), registry)
        second = create_histogram("latency_seconds", "help", False, None, ("path",), other)
        assert first is not second

    def test_name_clash_with_foreign_collector_raises(self, registry):
        from prometheus_client import Counter

        Counter("latency_seconds_count", "clash", registry=registry)
        with pytest.raises(ValueError):
            create_histogram("latency_seconds", "help", False, None, (), registry)

    def test_reserved_label_rejected(self, registry):
        with pytest.raises(ValueError):
            create_histogram("latency_seconds", "help", False, None, ("le",), registry)

    def test_custom_buckets(self, registry):
        histogram = create_histogram("latency_seconds", "help", False, (0.1, 1.0), (), registry)
        histogram.observe((), 0.5)

        buckets = {s.labels["le"]: s.value for s in samples(registry, "latency_seconds_bucket")}
        assert buckets == {"0.1": 0.0, "1.0": 1.0, "+Inf": 1.0}


class TestTimestamps:
    def test_samples_untimestamped_by_default(self, registry):
        histogram = create_histogram("latency_seconds", "help", False, None, ("method",), registry)
        histogram.observe(("GET",), 0.1)

        assert all(s.timestamp is None for s in samples(registry, "latency_seconds_count"))

    def test_samples_carry_last_observation_time(self, registry):
        histogram = create_histogram("latency_seconds", "help", True, None, ("method",), registry)
        histogram.observe(("GET",), 0.1)

        (count,) = samples(registry, "latency_seconds_count")
        assert count.timestamp is not None
        assert all(s.timestamp == count.timestamp for s in samples(registry, "latency_seconds_bucket"))

    def test_timestamp_in_exposition(self, registry):
        histogram = create_histogram("latency_seconds", "help", True, None, (), registry)
        histogram.observe((), 0.1)

        line = next(
            line
            for line in generate_latest(registry).decode().splitlines()
            if line.startswith("latency_seconds_count")
        )
        assert len(line.split()) == 3
