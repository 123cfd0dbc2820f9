"""Operating system signals that start a shutdown sequence."""

import logging
import queue
import signal
import threading
from collections.abc import Callable, Iterable
from types import FrameType
from typing import Any

from shutdown_sequence.core.errors import SequenceConfigurationError
from shutdown_sequence.core.logs import FieldsAdapter

logger = logging.getLogger(__name__)

SignalLike = signal.Signals | int | str


def resolve_signal(value: SignalLike) -> signal.Signals:
    """Convert a signal number or name (`SIGTERM`, `term`) to `signal.Signals`."""
    if isinstance(value, signal.Signals):
        return value

    if isinstance(value, str):
        name = value.strip().upper()
        if not name.startswith("SIG"):
            name = f"SIG{name}"
        try:
            return signal.Signals[name]
        except KeyError:
            raise SequenceConfigurationError(
                "signal", f"signal '{value}' is unknown", value
            ) from None

    try:
        return signal.Signals(value)
    except ValueError:
        raise SequenceConfigurationError(
            "signal", f"signal {value} is unknown", value
        ) from None


def signal_name(signum: int) -> str:
    """Canonical name of a signal, e.g. `SIGUSR1`."""
    try:
        return signal.Signals(signum).name
    except ValueError:
        pass
    try:
        description = signal.strsignal(signum)
    except ValueError:
        description = None
    return description or str(signum)


class SignalWatcher:
    """Waits for the first of a set of signals and calls a trigger once.

    The signal handlers only queue the signal number, the trigger runs in a
    daemon thread so that a long shutdown never blocks the main thread.
    Handlers can only be installed from the main thread.
    """

    def __init__(
        self,
        signals: Iterable[SignalLike],
        trigger: Callable[[], None],
        logger: FieldsAdapter,
    ):
        self._signals = [resolve_signal(s) for s in signals]
        self._trigger = trigger
        self._logger = logger
        self._queue: queue.Queue[int | None] = queue.Queue(maxsize=1)
        self._previous: dict[signal.Signals, Any] = {}
        self._thread: threading.Thread | None = None

    def start(self) -> None:
        """Install the signal handlers and start the watcher thread.

        Raises:
            SequenceConfigurationError: If a signal can't be handled
        """
        for sig in self._signals:
            try:
                previous = signal.signal(sig, self._handle_signal)
                self._previous[sig] = signal.SIG_DFL if previous is None else previous
            except (OSError, ValueError, RuntimeError) as e:
                self._restore_handlers()
                raise SequenceConfigurationError(
                    "signal", f"signal {sig.name} can't be handled: {e}", sig
                ) from e

        self._thread = threading.Thread(
            target=self._watch, daemon=True, name="ShutdownSignalWatcher"
        )
        self._thread.start()

    def stop(self) -> None:
        """Restore the previous handlers and release the watcher thread."""
        self._restore_handlers()
        try:
            self._queue.put_nowait(None)
        except queue.Full:
            pass  # a signal is already pending, the thread wakes up anyway

    def _handle_signal(self, signum: int, frame: FrameType | None) -> None:
        try:
            self._queue.put_nowait(signum)
        except queue.Full:
            pass  # only the first delivery matters

    def _watch(self) -> None:
        signum = self._queue.get()
        if signum is None:
            return

        self._logger.with_fields(signal=signal_name(signum)).info(
            "Shutdown sequence started by signal"
        )
        self._trigger()

    def _restore_handlers(self) -> None:
        for sig, handler in self._previous.items():
            try:
                signal.signal(sig, handler)
            except (OSError, ValueError) as e:
                logger.warning(f"Can't restore handler for {sig.name}: {e}")
        self._previous.clear()
