"""
Lectio - OpenTelemetry Metrics

Counters for cache effectiveness and the fallback chain.

Key Metrics:
- lectio_cache_hits_total / lectio_cache_misses_total (attribute: tier, namespace)
- lectio_remote_fetches_total (attribute: outcome)
- lectio_fallbacks_total
- lectio_placeholders_total

Instruments are created from the metrics API; they are no-ops until an SDK
MeterProvider is installed by the host application.
"""
from __future__ import annotations

from typing import Optional

from opentelemetry import metrics
from opentelemetry.metrics import Meter

_lectio_metrics: Optional["LectioMetrics"] = None


class LectioMetrics:
    """Central metrics collector."""

    def __init__(self, meter: Meter):
        self.meter = meter

        self.cache_hits = meter.create_counter(
            name="lectio_cache_hits_total",
            description="Total cache hits",
            unit="1",
        )

        self.cache_misses = meter.create_counter(
            name="lectio_cache_misses_total",
            description="Total cache misses",
            unit="1",
        )

        self.remote_fetches = meter.create_counter(
            name="lectio_remote_fetches_total",
            description="Remote provider requests by outcome",
            unit="1",
        )

        self.fallbacks = meter.create_counter(
            name="lectio_fallbacks_total",
            description="Fallback hops to the default translation",
            unit="1",
        )

        self.placeholders = meter.create_counter(
            name="lectio_placeholders_total",
            description="Placeholder chapters synthesized",
            unit="1",
        )

    def record_cache_hit(self, namespace: str, tier: str) -> None:
        self.cache_hits.add(1, {"namespace": namespace, "tier": tier})

    def record_cache_miss(self, namespace: str) -> None:
        self.cache_misses.add(1, {"namespace": namespace})

    def record_remote_fetch(self, outcome: str) -> None:
        self.remote_fetches.add(1, {"outcome": outcome})

    def record_fallback(self, translation_id: str) -> None:
        self.fallbacks.add(1, {"translation": translation_id})

    def record_placeholder(self, translation_id: str) -> None:
        self.placeholders.add(1, {"translation": translation_id})


def get_metrics() -> LectioMetrics:
    """Get or create the process-wide metrics collector."""
    global _lectio_metrics
    if _lectio_metrics is None:
        _lectio_metrics = LectioMetrics(metrics.get_meter("lectio"))
    return _lectio_metrics
