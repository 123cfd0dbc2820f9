"""Ordered, deadline bounded shutdown sequences for processes."""

from shutdown_sequence.config import Environment, Settings
from shutdown_sequence.container import SequenceContainer
from shutdown_sequence.core.builder import SequenceBuilder, new_sequence
from shutdown_sequence.core.context import ShutdownContext
from shutdown_sequence.core.errors import (
    Cancelled,
    ContextError,
    DeadlineExceeded,
    SequenceConfigurationError,
)
from shutdown_sequence.core.sequence import Sequence, Step, exit_process
from shutdown_sequence.metrics.service import SequenceMetrics
from shutdown_sequence.runner import run

__all__ = [
    "Cancelled",
    "ContextError",
    "DeadlineExceeded",
    "Environment",
    "Sequence",
    "SequenceBuilder",
    "SequenceConfigurationError",
    "SequenceContainer",
    "SequenceMetrics",
    "Settings",
    "ShutdownContext",
    "Step",
    "exit_process",
    "new_sequence",
    "run",
]
