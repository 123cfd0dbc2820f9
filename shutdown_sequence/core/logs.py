"""Structured logging helpers for the shutdown sequence.

Fields are bound to a logger once and then travel with every record as
`extra` attributes. The names of the bound fields are kept in the `fields`
record attribute so that `FieldsFormatter` can render them.
"""

import logging
import os
from collections.abc import Mapping, MutableMapping
from typing import Any

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


class FieldsAdapter(logging.LoggerAdapter):  # type: ignore[type-arg]
    """Logger adapter that merges bound fields into each record."""

    def __init__(self, logger: logging.Logger, fields: Mapping[str, Any] | None = None):
        super().__init__(logger, dict(fields or {}))

    @property
    def fields(self) -> dict[str, Any]:
        return dict(self.extra or {})

    def with_fields(self, **fields: Any) -> "FieldsAdapter":
        """Return a new adapter with `fields` added to the bound ones."""
        return FieldsAdapter(self.logger, {**self.fields, **fields})

    def process(
        self, msg: Any, kwargs: MutableMapping[str, Any]
    ) -> tuple[Any, MutableMapping[str, Any]]:
        fields = {**self.fields, **(kwargs.get("extra") or {})}
        kwargs["extra"] = {**fields, "fields": fields}
        return msg, kwargs


class FieldsFormatter(logging.Formatter):
    """Formatter that appends bound fields as `key=value` pairs."""

    def formatMessage(self, record: logging.LogRecord) -> str:
        message = super().formatMessage(record)
        fields = getattr(record, "fields", None)
        if not fields:
            return message
        pairs = " ".join(f"{key}={value}" for key, value in fields.items())
        return f"{message} {pairs}"


def configure_logging(
    name: str,
    level: str = "INFO",
    directory: str | None = None,
) -> None:
    """Configure the root logger for a process that owns a shutdown sequence.

    Args:
        name: Process name, used for the log file name
        level: Name of the log level
        directory: Optional directory where `<name>.log` is appended to
    """
    handlers: list[logging.Handler] = [logging.StreamHandler()]
    file_error: OSError | None = None

    if directory:
        path = os.path.join(directory, f"{name}.log")
        try:
            handlers.append(logging.FileHandler(path, mode="a", encoding="utf-8"))
        except OSError as e:
            file_error = e

    formatter = FieldsFormatter(LOG_FORMAT)
    for handler in handlers:
        handler.setFormatter(formatter)

    logging.basicConfig(level=level.upper(), handlers=handlers, force=True)

    if file_error is not None:
        logger.warning(
            f"Can't write log file, logging to console only: {file_error}"
        )


def format_duration(seconds: float) -> str:
    """Render a duration in seconds as `1.5s`."""
    return f"{seconds:g}s"
