"""Shared testing utilities for shutdown sequence tests."""

import threading
import time
from collections.abc import Callable


class RecordingExit:
    """Exit action that records the codes instead of exiting."""

    def __init__(self) -> None:
        self.codes: list[int] = []
        self.called = threading.Event()

    def __call__(self, code: int) -> None:
        self.codes.append(code)
        self.called.set()

    @property
    def code(self) -> int | None:
        return self.codes[-1] if self.codes else None


def wait_for(predicate: Callable[[], bool], timeout: float = 2.0) -> bool:
    """Poll `predicate` until it is true or `timeout` seconds have passed."""
    end = time.monotonic() + timeout
    while time.monotonic() < end:
        if predicate():
            return True
        time.sleep(0.01)
    return predicate()
