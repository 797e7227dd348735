"""Error taxonomy shared by the circulation, settlement and stock components."""


class LibraryError(Exception):
    """Base class for every business rule failure."""
    kind = "LibraryError"
    status_code = 400

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(LibraryError):
    """Missing or malformed input."""
    kind = "ValidationError"


class Unavailable(LibraryError):
    """No free copy of the requested book."""
    kind = "Unavailable"


class InvalidState(LibraryError):
    """Transition attempted from the wrong loan status."""
    kind = "InvalidState"


class NotFound(LibraryError):
    kind = "NotFound"
    status_code = 404


class InsufficientStock(LibraryError):
    """Manual adjustment would drive available or total copies negative."""
    kind = "InsufficientStock"


class DuplicateTransaction(LibraryError):
    kind = "DuplicateTransaction"
