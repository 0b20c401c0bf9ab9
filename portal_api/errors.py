"""Domain errors raised by the stores and translated to HTTP at the app boundary."""


class PortalError(Exception):
    status_code = 500
    default_message = "Internal Server Error"

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class InvalidIdentifier(PortalError):
    status_code = 400
    default_message = "Invalid ID format"


class MissingField(PortalError):
    status_code = 400
    default_message = "Required field is missing"


class MissingFile(PortalError):
    status_code = 400
    default_message = "No file uploaded"


class DuplicateSubscriber(PortalError):
    status_code = 400
    default_message = "Email is already subscribed"


class NotFound(PortalError):
    status_code = 404
    default_message = "Not found"


class DuplicateKey(PortalError):
    """A write collided with an existing unique key in the store."""

    status_code = 409
    default_message = "Duplicate key"


class InsertError(PortalError):
    default_message = "Cannot insert! Try again later."


class StoreUnavailable(PortalError):
    default_message = "Document store unavailable"
