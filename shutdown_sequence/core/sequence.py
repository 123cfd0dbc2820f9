"""Shutdown sequence runtime.

A sequence runs its steps in order on a background thread, bounded by a
single deadline, and then calls the exit action. It runs at most once per
process, whether it is started explicitly or by a signal.
"""

import logging
import os
import sys
import threading
import time
from collections.abc import Callable, Iterable

from shutdown_sequence.core.context import ShutdownContext
from shutdown_sequence.core.logs import FieldsAdapter
from shutdown_sequence.core.signals import SignalLike, SignalWatcher
from shutdown_sequence.metrics.service import (
    STEP_ABORTED,
    STEP_FAILED,
    STEP_SUCCEEDED,
    SequenceMetrics,
)

Step = Callable[[ShutdownContext], object]
ExitAction = Callable[[int], object]


def exit_process(code: int) -> None:
    """Flush logs and standard streams, then terminate the process.

    Uses os._exit because sys.exit only ends the calling thread when the
    sequence was started by the signal watcher.
    """
    logging.shutdown()
    for stream in (sys.stdout, sys.stderr):
        if stream is None:
            continue
        try:
            stream.flush()
        except (OSError, ValueError):
            pass
    os._exit(code)


class Sequence:
    """Ordered list of shutdown steps with a deadline and an exit action.

    Don't create instances directly, use `new_sequence()` and the builder.
    Steps can be added with `add_step` and `add_steps` until the sequence is
    started; additions made while `start` runs are not picked up.
    """

    def __init__(
        self,
        logger: FieldsAdapter,
        delay: float,
        timeout: float,
        steps: Iterable[Step],
        exit_action: ExitAction,
        signals: Iterable[SignalLike] = (),
        metrics: SequenceMetrics | None = None,
    ):
        self._logger = logger
        self._delay = delay
        self._timeout = timeout
        self._steps: list[Step] = list(steps)
        self._exit = exit_action
        self._metrics = metrics
        self._lock = threading.RLock()
        self._done = False
        self._watcher: SignalWatcher | None = None

        signals = list(signals)
        if signals:
            self._watcher = SignalWatcher(
                signals, trigger=lambda: self.start(0), logger=logger
            )
            self._watcher.start()

    @property
    def delay(self) -> float:
        return self._delay

    @property
    def timeout(self) -> float:
        return self._timeout

    @property
    def done(self) -> bool:
        with self._lock:
            return self._done

    def add_step(self, step: Step) -> None:
        self._steps.append(step)

    def add_steps(self, *steps: Step) -> None:
        self._steps.extend(steps)

    def close(self) -> None:
        """Stop reacting to signals and restore the previous handlers."""
        if self._watcher is not None:
            self._watcher.stop()
            self._watcher = None

    def start(self, code: int) -> None:
        """Run all the steps in order, then call the exit action with `code`.

        Blocks until the steps finish or the timeout expires, whatever
        happens first. Calls made after the sequence completed do nothing.
        """
        with self._lock:
            logger = self._logger.with_fields(code=code)

            if self._done:
                logger.error(
                    "Shutdown has been requested again after it was already completed, "
                    "this is most likely a bug in the code that uses it, will do nothing"
                )
                if self._metrics is not None:
                    self._metrics.record_repeated()
                return

            start_time = time.perf_counter()
            if self._metrics is not None:
                self._metrics.record_started()

            if self._delay > 0:
                logger.info("Shutdown has been requested and will start after the delay")
                time.sleep(self._delay)

            context = ShutdownContext.with_timeout(self._timeout)
            try:
                logger = logger.with_fields(
                    deadline=context.deadline.strftime("%Y-%m-%dT%H:%M:%SZ")
                )
                logger.info("Shutdown sequence started")

                runner = threading.Thread(
                    target=self._run_steps,
                    args=(context, list(self._steps), logger),
                    daemon=True,
                    name="ShutdownSequenceSteps",
                )
                runner.start()

                logger.info("Shutdown sequence waiting for steps to finish")
                context.wait()

                self._done = True
                if self._metrics is not None:
                    self._metrics.record_finished(time.perf_counter() - start_time)
                logger.info("Shutdown sequence finished, exiting")
                self._exit(code)
            finally:
                context.cancel()

    def _run_steps(
        self,
        context: ShutdownContext,
        steps: list[Step],
        logger: FieldsAdapter,
    ) -> None:
        try:
            for index, step in enumerate(steps):
                step_logger = logger.with_fields(step=index)
                step_logger.info("Starting shutdown step")
                try:
                    step(context)
                except BaseException as e:
                    # SystemExit from a step must not end the loop
                    step_logger.error(
                        "Shutdown step failed",
                        exc_info=True,
                        extra={"error": str(e)},
                    )
                    self._record_step(STEP_FAILED)
                else:
                    step_logger.info("Shutdown step succeeded")
                    self._record_step(STEP_SUCCEEDED)

                remaining = len(steps) - index - 1
                if context.is_cancelled() and remaining > 0:
                    step_logger.info("Remaining shutdown steps aborted due to timeout")
                    self._record_step(STEP_ABORTED, remaining)
                    break
        finally:
            context.cancel()

    def _record_step(self, outcome: str, count: int = 1) -> None:
        if self._metrics is not None:
            self._metrics.record_step(outcome, count)
