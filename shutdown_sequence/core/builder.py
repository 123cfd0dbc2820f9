"""Builder for shutdown sequences."""

import logging
from datetime import timedelta

from shutdown_sequence.core.errors import SequenceConfigurationError
from shutdown_sequence.core.logs import FieldsAdapter, format_duration
from shutdown_sequence.core.sequence import ExitAction, Sequence, Step, exit_process
from shutdown_sequence.core.signals import SignalLike
from shutdown_sequence.metrics.service import SequenceMetrics

DEFAULT_TIMEOUT = 60.0

Duration = float | int | timedelta


def _seconds(value: Duration) -> float:
    if isinstance(value, timedelta):
        return value.total_seconds()
    return float(value)


class SequenceBuilder:
    """Collects the configuration of a shutdown sequence.

    Steps are called in the order they were added when the sequence is
    started. The exit action is called after all the steps have finished or
    when the timeout expires, whatever happens first:

        sequence = (
            new_sequence()
            .logger(logger)
            .signals(signal.SIGTERM, signal.SIGINT)
            .step(lambda ctx: shutil.rmtree(tmp))
            .build()
        )
        ...
        sequence.start(0)

    Steps run in a separate thread with a context carrying the deadline.
    Steps are responsible for honouring it; a step that doesn't is left
    running, but the exit action (by default terminating the process) is
    called anyhow.
    """

    def __init__(self) -> None:
        self._logger: logging.Logger | None = None
        self._delay: float = 0.0
        self._timeout: float = DEFAULT_TIMEOUT
        self._signals: list[SignalLike] = []
        self._steps: list[Step] = []
        self._exit: ExitAction | None = exit_process
        self._metrics: SequenceMetrics | None = None

    def logger(self, value: logging.Logger | None) -> "SequenceBuilder":
        """Set the logger used by the sequence. This is mandatory."""
        self._logger = value
        return self

    def delay(self, value: Duration) -> "SequenceBuilder":
        """Set the pause between a start request and the first step. Default is zero."""
        self._delay = _seconds(value)
        return self

    def timeout(self, value: Duration) -> "SequenceBuilder":
        """Set the maximum time between the start of the steps and the exit action.

        Steps still running when it expires are ignored. Default is one minute.
        """
        self._timeout = _seconds(value)
        return self

    def signal(self, value: SignalLike) -> "SequenceBuilder":
        """Add a signal that starts the sequence. By default no signal is used."""
        self._signals.append(value)
        return self

    def signals(self, *values: SignalLike) -> "SequenceBuilder":
        """Add several signals that start the sequence."""
        self._signals.extend(values)
        return self

    def step(self, value: Step) -> "SequenceBuilder":
        """Append a step. Steps run in the order they were added."""
        self._steps.append(value)
        return self

    def steps(self, *values: Step) -> "SequenceBuilder":
        """Append several steps, keeping their order."""
        self._steps.extend(values)
        return self

    def exit(self, value: ExitAction | None) -> "SequenceBuilder":
        """Set the function called when the sequence completes.

        The default terminates the process. Unit tests replace it to keep
        the test process alive.
        """
        self._exit = value
        return self

    def metrics(self, value: SequenceMetrics | None) -> "SequenceBuilder":
        """Set the metrics recorder. By default nothing is recorded."""
        self._metrics = value
        return self

    def build(self) -> Sequence:
        """Create the sequence. This doesn't start it, use `Sequence.start` for that.

        Raises:
            SequenceConfigurationError: If the configuration is invalid
        """
        if self._logger is None:
            raise SequenceConfigurationError("logger", "logger is mandatory")
        if self._delay < 0:
            raise SequenceConfigurationError(
                "delay",
                "delay must be greater or equal than zero, "
                f"but it is {format_duration(self._delay)}",
                self._delay,
            )
        if self._timeout < 0:
            raise SequenceConfigurationError(
                "timeout",
                "timeout must be greater or equal than zero, "
                f"but it is {format_duration(self._timeout)}",
                self._timeout,
            )
        if self._exit is None:
            raise SequenceConfigurationError("exit", "exit function is mandatory")

        logger = FieldsAdapter(self._logger).with_fields(
            component="shutdown",
            delay=format_duration(self._delay),
            timeout=format_duration(self._timeout),
        )

        return Sequence(
            logger=logger,
            delay=self._delay,
            timeout=self._timeout,
            steps=list(self._steps),
            exit_action=self._exit,
            signals=list(self._signals),
            metrics=self._metrics,
        )


def new_sequence() -> SequenceBuilder:
    """Create a builder with the default configuration."""
    return SequenceBuilder()
