"""Custom exceptions for the marax package."""


class MaraXError(Exception):
    """Base class for all marax related errors."""


class DecodeError(MaraXError):
    """A telemetry line could not be decoded."""

    def __init__(self, line: str, message: str) -> None:
        super().__init__(f"{message}: {line!r}")
        self.line = line


class FieldCountError(DecodeError):
    """The line does not consist of exactly seven fields."""


class UnknownModeError(DecodeError):
    """The leading token does not start with a known mode character."""


class NumericError(DecodeError):
    """A numeric field is not an integer."""


class InvalidBooleanError(DecodeError):
    """A flag field is not 0 or 1."""


class TransportError(MaraXError):
    """Communication error in the serial transport layer."""


class DisplayError(MaraXError):
    """The display could not be opened or written."""
