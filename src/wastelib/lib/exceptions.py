"""Custom exceptions for the wastelib decoders."""


class WastelibError(Exception):
    """Base class for exceptions in this module."""

    pass


class EndOfDataError(WastelibError):
    """Raised when a read runs past the end of the available data."""

    pass


class OutOfRangeError(WastelibError):
    """Raised for seeks, indices or coordinates outside the valid range."""

    pass


class FormatError(WastelibError):
    """Raised when data does not match the expected file format."""

    pass


class CorruptDataError(WastelibError):
    """Raised when compressed data contains an invalid command or reference."""

    pass
