"""Prometheus metrics for shutdown sequences."""

from shutdown_sequence.metrics.service import SequenceMetrics

__all__ = ["SequenceMetrics"]
