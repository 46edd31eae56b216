"""Exception types shared across Collageworks.

Every error that is meant to reach a user carries a message that can be shown
as-is. Lower-level details (HTTP status codes, stack traces) are logged at the
boundary where the error is converted, never shown.
"""


class CollageworksError(Exception):
    """Base class for all Collageworks errors."""


class SourceResolutionError(CollageworksError):
    """An input image could not be read or decoded."""


class GenerationError(CollageworksError):
    """An enhancement job failed, returned malformed output, or could not be reached."""


class LayerNotFoundError(CollageworksError):
    """A layer id does not exist on the canvas."""


class StockSearchError(CollageworksError):
    """Stock photo search failed.

    Attributes:
        status_code: HTTP status to report to API callers (400 for bad input,
            500 for configuration or upstream failures).
    """

    def __init__(self, message: str, status_code: int = 500) -> None:
        super().__init__(message)
        self.status_code = status_code


class SessionBusyError(CollageworksError):
    """An enhancement or edit is already running for this session."""
