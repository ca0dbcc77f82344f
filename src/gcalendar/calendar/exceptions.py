"""Calendar API exceptions."""


class CalendarError(Exception):
    """Base exception for Calendar API errors."""

    pass


class NotAuthenticatedError(CalendarError):
    """Raised when an operation needs a session that does not exist yet."""

    pass


class InvalidArgumentError(CalendarError):
    """Raised when a required argument is missing or malformed."""

    pass


class CalendarTransportError(CalendarError):
    """Raised when the Calendar API cannot be reached."""

    pass


class CalendarAPIError(CalendarError):
    """Raised when the Calendar API answers with an unexpected status."""

    def __init__(self, message: str, status_code: int | None = None):
        self.status_code = status_code
        super().__init__(message)
