"""Deadline carrying context handed to every shutdown step."""

import threading
import time
from datetime import UTC, datetime, timedelta

from shutdown_sequence.core.errors import Cancelled, ContextError, DeadlineExceeded


class ShutdownContext:
    """Deadline, cancellation flag and wait handle shared by all steps.

    The context is done either when it is cancelled explicitly or when its
    deadline passes. The first of the two wins and determines `error`.

    Steps that may block should honour it, for example:

        def close_connections(ctx: ShutdownContext) -> None:
            for conn in pool:
                ctx.check()
                conn.close(timeout=ctx.remaining())
    """

    def __init__(self, deadline: float, wall_deadline: datetime) -> None:
        """Initialize the context.

        Args:
            deadline: Deadline on the `time.monotonic()` clock
            wall_deadline: The same deadline as an aware UTC datetime
        """
        self._deadline = deadline
        self._wall_deadline = wall_deadline
        self._done = threading.Event()
        self._lock = threading.Lock()
        self._error: ContextError | None = None

    @classmethod
    def with_timeout(cls, timeout: float) -> "ShutdownContext":
        """Create a context whose deadline is `timeout` seconds from now."""
        return cls(
            deadline=time.monotonic() + timeout,
            wall_deadline=datetime.now(UTC) + timedelta(seconds=timeout),
        )

    @property
    def deadline(self) -> datetime:
        return self._wall_deadline

    @property
    def error(self) -> ContextError | None:
        """Reason the context is done, or None while it is still active."""
        self._poll_deadline()
        return self._error

    def remaining(self) -> float:
        """Seconds left until the deadline, never negative."""
        return max(self._deadline - time.monotonic(), 0.0)

    def is_cancelled(self) -> bool:
        self._poll_deadline()
        return self._done.is_set()

    def cancel(self) -> None:
        # An expired deadline takes precedence over a late cancellation
        self._poll_deadline()
        self._finish(Cancelled())

    def check(self) -> None:
        """Raise the context error if the context is done."""
        error = self.error
        if error is not None:
            raise error

    def wait(self, timeout: float | None = None) -> bool:
        """Block until the context is done or `timeout` seconds have passed.

        Returns:
            True if the context is done
        """
        end = None if timeout is None else time.monotonic() + timeout
        while not self.is_cancelled():
            now = time.monotonic()
            limit = self._deadline - now
            if end is not None:
                if now >= end:
                    break
                limit = min(limit, end - now)
            self._done.wait(max(limit, 0.0))
        return self.is_cancelled()

    def _poll_deadline(self) -> None:
        if not self._done.is_set() and time.monotonic() >= self._deadline:
            self._finish(DeadlineExceeded())

    def _finish(self, error: ContextError) -> None:
        with self._lock:
            if self._error is None:
                self._error = error
                self._done.set()
