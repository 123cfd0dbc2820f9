"""Tests for the process runner."""

import logging

import pytest
from dependency_injector import providers

from shutdown_sequence import Sequence, SequenceContainer, Settings, ShutdownContext, run
from tests.testing_utils import RecordingExit


@pytest.fixture
def configured_logging(monkeypatch) -> list[tuple]:
    """Capture logging setup instead of reconfiguring the root logger."""
    calls: list[tuple] = []

    def fake_configure_logging(name, level="INFO", directory=None):
        calls.append((name, level, directory))

    monkeypatch.setattr("shutdown_sequence.runner.configure_logging", fake_configure_logging)
    return calls


@pytest.fixture
def container(exit_recorder: RecordingExit) -> SequenceContainer:
    container = SequenceContainer()
    container.config.override(
        Settings(shutdown_signals=[], log_level="DEBUG", log_directory="/tmp/logs")
    )
    container.exit_action.override(providers.Object(exit_recorder))
    return container


class TestRun:
    """Tests for run()."""

    def test_starts_sequence_with_worker_code(
        self, container: SequenceContainer, exit_recorder: RecordingExit, configured_logging
    ) -> None:
        run(lambda sequence: 3, container)

        assert exit_recorder.codes == [3]
        assert container.sequence().done is True

    def test_none_means_success(
        self, container: SequenceContainer, exit_recorder: RecordingExit, configured_logging
    ) -> None:
        run(lambda sequence: None, container)

        assert exit_recorder.codes == [0]

    def test_worker_failure_exits_with_one(
        self,
        container: SequenceContainer,
        exit_recorder: RecordingExit,
        configured_logging,
        caplog: pytest.LogCaptureFixture,
    ) -> None:
        caplog.set_level(logging.ERROR)

        def worker(sequence: Sequence) -> int:
            raise RuntimeError("worker exploded")

        run(worker, container)

        assert exit_recorder.codes == [1]
        assert "worker exploded" in caplog.text

    def test_worker_registers_steps(
        self, container: SequenceContainer, exit_recorder: RecordingExit, configured_logging
    ) -> None:
        calls: list[str] = []

        def worker(sequence: Sequence) -> int:
            def cleanup(ctx: ShutdownContext) -> None:
                calls.append("cleanup")

            sequence.add_step(cleanup)
            return 0

        run(worker, container)

        assert calls == ["cleanup"]
        assert exit_recorder.codes == [0]

    def test_configures_logging_from_settings(
        self, container: SequenceContainer, configured_logging
    ) -> None:
        run(lambda sequence: 0, container, name="agent_next_step_runner")

        assert configured_logging == [("agent_next_step_runner", "DEBUG", "/tmp/logs")]

    def test_sequence_already_started_by_worker(
        self, container: SequenceContainer, exit_recorder: RecordingExit, configured_logging
    ) -> None:
        def worker(sequence: Sequence) -> int:
            sequence.start(5)
            return 0

        run(worker, container)

        assert exit_recorder.codes == [5]
