"""Process runner that ends with the shutdown sequence."""

import logging
import threading
from collections.abc import Callable

from shutdown_sequence.config import Settings
from shutdown_sequence.container import SequenceContainer
from shutdown_sequence.core.logs import configure_logging
from shutdown_sequence.core.sequence import Sequence

logger = logging.getLogger(__name__)

Worker = Callable[[Sequence], int | None]


def run(
    worker: Worker,
    container: SequenceContainer | None = None,
    name: str = "shutdown_sequence",
) -> None:
    """Run `worker` and then the shutdown sequence.

    This is the main entry point for processes whose lifetime is one unit of
    work. It handles:
    - Logging setup
    - Sequence creation, including signal handlers
    - Running the worker in a daemon thread so the main thread keeps
      receiving signals
    - Starting the sequence with the worker's exit code

    The worker receives the sequence so that it can register its own steps.
    It returns the exit code (None means 0); if it raises, the failure is
    logged and the exit code is 1.

    Usage in main.py:
        from shutdown_sequence import run

        if __name__ == "__main__":
            run(process_steps)

    Must be called from the main thread when signals are configured.
    """
    if container is None:
        container = SequenceContainer()
        container.config.override(Settings.load())

    settings = container.config()
    configure_logging(name, settings.log_level, settings.log_directory)

    sequence = container.sequence()
    codes: list[int] = []

    def target() -> None:
        try:
            result = worker(sequence)
        except Exception:
            logger.exception("Worker failed")
            codes.append(1)
        else:
            codes.append(0 if result is None else int(result))

    thread = threading.Thread(target=target, daemon=True, name="ShutdownSequenceWorker")
    thread.start()
    thread.join()

    sequence.start(codes[0] if codes else 1)
