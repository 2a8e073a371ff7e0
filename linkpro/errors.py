"""
Error taxonomy for LinkPro.

Every error raised by the core is a `LinkProError`. Each carries a
user-facing `message` (surfaced verbatim by the session controller and the
API) and the HTTP `status_code` the API layer answers with.

None of these are fatal to the process. `StorageUnavailable` aborts the
operation that hit it; the transaction it interrupted leaves no partial effect.
"""

from typing import Optional


class LinkProError(Exception):
    """Base class for all recoverable core errors."""

    status_code: int = 400
    default_message: str = "Something went wrong. Please try again."

    def __init__(self, message: Optional[str] = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationError(LinkProError, ValueError):
    """Malformed or missing input; always correctable by the caller."""

    status_code = 400
    default_message = "All fields are required."


class DuplicateEmail(LinkProError):
    status_code = 409
    default_message = "An account with this email already exists. Please login instead."


class DuplicateUsername(LinkProError):
    status_code = 409
    default_message = "This username is already taken. Please choose another one."


class NotFound(LinkProError):
    status_code = 404
    default_message = "Not found."


class InvalidCredentials(LinkProError):
    status_code = 401
    default_message = "Invalid password. Please try again."


class Forbidden(LinkProError):
    status_code = 403
    default_message = "You do not have permission to modify this link."


class StorageUnavailable(LinkProError):
    """The persistence medium could not be reached; the operation was aborted."""

    status_code = 503
    default_message = "Storage is unavailable. Please try again later."
