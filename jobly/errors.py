"""
Error types raised by the data-access layer.

Each error carries the HTTP-style status a web layer would answer with.
"""


class JoblyError(Exception):
    """Base class for Jobly errors."""

    status_code = 500

    def __init__(self, message: str = ""):
        super().__init__(message)
        self.message = message


class BadRequestError(JoblyError):
    """Request data is inconsistent or invalid."""

    status_code = 400


class InvalidArgumentError(BadRequestError):
    """A query builder was called with unusable input (e.g. no fields)."""


class NotFoundError(JoblyError):
    """Requested row does not exist."""

    status_code = 404
