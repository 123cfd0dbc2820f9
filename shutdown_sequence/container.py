"""Dependency injection container for a process shutdown sequence."""

import logging

from dependency_injector import containers, providers

from shutdown_sequence.config import Settings
from shutdown_sequence.core.sequence import ExitAction, Sequence, exit_process
from shutdown_sequence.metrics.service import SequenceMetrics


def build_sequence(
    settings: Settings,
    logger: logging.Logger,
    metrics: SequenceMetrics,
    exit_action: ExitAction,
) -> Sequence:
    return settings.to_builder(logger).metrics(metrics).exit(exit_action).build()


class SequenceContainer(containers.DeclarativeContainer):
    """Container holding the one shutdown sequence of the process.

    Collaborators receive the sequence and register their cleanup steps:

        container = SequenceContainer()
        container.config.override(Settings.load())
        container.sequence().add_step(close_database)
    """

    # Configuration - must be provided
    config = providers.Dependency(instance_of=Settings)

    logger = providers.Singleton(logging.getLogger, "shutdown_sequence")

    metrics = providers.Singleton(SequenceMetrics)

    # Tests override this to keep the process alive
    exit_action = providers.Object(exit_process)

    sequence = providers.Singleton(
        build_sequence,
        settings=config,
        logger=logger,
        metrics=metrics,
        exit_action=exit_action,
    )
