"""
Exception types shared by the services and routes.

Routes map these to HTTP status codes; nothing below the route layer
deals in status codes.
"""


class SieveboxError(Exception):
    """Base class for all application errors."""


class PayloadError(SieveboxError):
    """Request body is missing a required field or has a bad value."""


class FilterConflictError(SieveboxError):
    """A save would break name uniqueness or the folder/label namespace rule."""
    def __init__(self, message, conflict=None):
        self.conflict = conflict
        super().__init__(message)


class FilterNotFoundError(SieveboxError):
    def __init__(self, filter_id):
        self.filter_id = filter_id
        super().__init__('Filter not found')


class UnknownUserError(SieveboxError):
    """The ?db= collection name is not in the configured user list."""


class StorageError(SieveboxError):
    """Reading or writing a filter collection failed."""
