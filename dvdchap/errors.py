"""Exceptions raised by dvdchap."""


class DvdChapError(Exception):
    """Base exception for all dvdchap errors.

    Every error is fatal to a run; the CLI maps all of them to exit code 1.
    """


class UsageError(DvdChapError):
    """Raised for malformed command-line input (title not a non-negative integer)."""


class OpenError(DvdChapError):
    """Raised when the disc or one of its title sets cannot be opened."""


class IfoFormatError(OpenError):
    """Raised when an IFO file is structurally damaged.

    Covers bad magic, truncated tables and indices pointing outside the
    table they reference.
    """


class TitleRangeError(DvdChapError):
    """Raised when a requested title number exceeds the disc's title count."""

    def __init__(self, requested: int, available: int) -> None:
        super().__init__(f"Title {requested} requested, but DVD has {available} titles.")
        self.requested = requested
        self.available = available
