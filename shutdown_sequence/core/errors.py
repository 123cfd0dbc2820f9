"""Exceptions raised by the shutdown sequence and its step context."""


class SequenceConfigurationError(ValueError):
    """Raised when a shutdown sequence can't be built from its configuration."""

    def __init__(self, option: str, message: str, value: object = None) -> None:
        self.option = option
        self.value = value
        super().__init__(message)


class ContextError(Exception):
    """Base class for the reasons a shutdown context is done."""

    pass


class DeadlineExceeded(ContextError):
    """The deadline of the shutdown context has passed."""

    def __init__(self) -> None:
        super().__init__("context deadline exceeded")


class Cancelled(ContextError):
    """The shutdown context was cancelled before its deadline."""

    def __init__(self) -> None:
        super().__init__("context canceled")
