"""Prometheus metrics for shutdown sequences.

The sequence records into these collectors when a `SequenceMetrics` instance
is given to the builder. Recording never interrupts the shutdown itself.
"""

import logging

from prometheus_client import REGISTRY, CollectorRegistry, Counter, Gauge, Histogram, generate_latest

logger = logging.getLogger(__name__)

STEP_SUCCEEDED = "succeeded"
STEP_FAILED = "failed"
STEP_ABORTED = "aborted"


class SequenceMetrics:
    """Collectors describing the progress of a shutdown sequence."""

    def __init__(self, registry: CollectorRegistry = REGISTRY):
        """Initialize the collectors.

        Args:
            registry: Registry the collectors are registered with.
        """
        self.registry = registry

        self.application_shutting_down = Gauge(
            "application_shutting_down",
            "Whether application is shutting down (1=yes, 0=no)",
            registry=registry,
        )

        self.graceful_shutdown_duration_seconds = Histogram(
            "graceful_shutdown_duration_seconds",
            "Duration of graceful shutdowns",
            registry=registry,
        )

        self.shutdown_steps_total = Counter(
            "shutdown_steps_total",
            "Shutdown steps by outcome",
            ["outcome"],
            registry=registry,
        )

        self.shutdown_repeated_requests_total = Counter(
            "shutdown_repeated_requests_total",
            "Shutdown requests received after the sequence completed",
            registry=registry,
        )

    def metrics_text(self) -> str:
        """Generate the registry contents in Prometheus text format."""
        return generate_latest(self.registry).decode("utf-8")

    def record_started(self) -> None:
        try:
            self.application_shutting_down.set(1)
        except Exception as e:
            logger.error(f"Error setting shutdown state: {e}")

    def record_step(self, outcome: str, count: int = 1) -> None:
        """Count steps that finished with the given outcome.

        Args:
            outcome: One of `succeeded`, `failed` or `aborted`
            count: Number of steps
        """
        try:
            self.shutdown_steps_total.labels(outcome=outcome).inc(count)
        except Exception as e:
            logger.error(f"Error recording shutdown step: {e}")

    def record_finished(self, duration: float) -> None:
        try:
            self.graceful_shutdown_duration_seconds.observe(duration)
        except Exception as e:
            logger.error(f"Error recording shutdown duration: {e}")

    def record_repeated(self) -> None:
        try:
            self.shutdown_repeated_requests_total.inc()
        except Exception as e:
            logger.error(f"Error recording repeated shutdown request: {e}")
