"""
Error types raised by the forecasting services.
Routes never catch these; app.main maps them to HTTP responses.
"""


class ServiceError(Exception):
    """Base class for errors surfaced to API callers."""

    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(ServiceError):
    """A request parameter violates a documented constraint."""

    status_code = 400


class NotFoundError(ServiceError):
    """The referenced record does not exist or belongs to another user."""

    status_code = 404


class DependencyError(ServiceError):
    """The underlying store failed unexpectedly."""

    status_code = 500
