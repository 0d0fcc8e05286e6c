"""
Histogram factory backed by prometheus_client.

Handles are cached per (registry, metric name) so that rebuilding a
middleware stack, or mounting the middleware on a second app that shares the
registry, reuses the already-registered histogram instead of tripping
prometheus_client's duplicate-timeseries check.
"""

import logging
import threading
import time
import weakref
from collections.abc import Iterable, Sequence

from prometheus_client import CollectorRegistry, Histogram
from prometheus_client.metrics_core import Metric
from prometheus_client.registry import Collector

logger = logging.getLogger(__name__)

_lock = threading.Lock()
_histograms: "weakref.WeakKeyDictionary[CollectorRegistry, dict[str, DurationHistogram]]" = (
    weakref.WeakKeyDictionary()
)


class DurationHistogram(Collector):
    """A labelled histogram registered as its own collector.

    Exposition goes through ``collect`` so that, when timestamps are
    enabled, every sample of a series carries the wall-clock time of that
    series' last observation.
    """

    def __init__(
        self,
        name: str,
        documentation: str,
        label_names: Sequence[str],
        buckets: Sequence[float] | None = None,
        include_timestamp: bool = False,
    ) -> None:
        self.name = name
        self.label_names = tuple(label_names)
        self.include_timestamp = include_timestamp

        kwargs = {}
        if buckets is not None:
            kwargs["buckets"] = tuple(buckets)
        self._histogram = Histogram(name, documentation, self.label_names, registry=None, **kwargs)

        self._observed_at: dict[tuple[str, ...], float] = {}
        self._observed_lock = threading.Lock()

    def labels(self, *label_values: str):
        if not self.label_names:
            return self._histogram
        return self._histogram.labels(*label_values)

    def observe(self, label_values: Sequence[str], seconds: float) -> None:
        values = tuple(label_values)
        self.labels(*values).observe(seconds)
        if self.include_timestamp:
            with self._observed_lock:
                self._observed_at[values] = time.time()

    def describe(self) -> Iterable[Metric]:
        return self._histogram.describe()

    def collect(self) -> Iterable[Metric]:
        metrics = self._histogram.collect()
        if not self.include_timestamp:
            return metrics

        with self._observed_lock:
            observed_at = dict(self._observed_at)

        for metric in metrics:
            stamped = []
            for sample in metric.samples:
                key = tuple(sample.labels.get(name, "") for name in self.label_names)
                stamped.append(sample._replace(timestamp=observed_at.get(key)))
            metric.samples = stamped
        return metrics


def create_histogram(
    name: str,
    help_text: str,
    include_timestamp: bool,
    buckets: Sequence[float] | None,
    label_names: Sequence[str],
    registry: CollectorRegistry,
) -> DurationHistogram:
    """Return the histogram registered under ``name`` in ``registry``, creating it if needed.

    Raises ValueError if ``name`` is already registered through this factory
    with a different label schema, or if prometheus_client rejects the
    definition (invalid names, reserved labels, duplicated series).
    """
    label_names = tuple(label_names)

    with _lock:
        per_registry = _histograms.setdefault(registry, {})
        existing = per_registry.get(name)
        if existing is not None:
            if existing.label_names != label_names:
                raise ValueError(
                    f"Histogram {name!r} is already registered with labels "
                    f"{list(existing.label_names)}, cannot register it with {list(label_names)}"
                )
            logger.debug("Reusing histogram %s", name)
            return existing

        histogram = DurationHistogram(
            name,
            help_text,
            label_names,
            buckets=buckets,
            include_timestamp=include_timestamp,
        )
        registry.register(histogram)
        per_registry[name] = histogram

    logger.debug("Registered histogram %s with labels %s", name, list(label_names))
    return histogram
