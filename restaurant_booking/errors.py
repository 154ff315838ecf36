class BookingError(Exception):
    """Base class for errors that end a request with a client-visible status."""

    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class InvalidInput(BookingError):
    status_code = 400


class Forbidden(BookingError):
    status_code = 403


class NotFound(BookingError):
    status_code = 404


class Conflict(BookingError):
    status_code = 409


class Internal(BookingError):
    status_code = 500
