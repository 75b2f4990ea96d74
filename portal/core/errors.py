"""Domain errors raised by services and rendered by the exception handlers in main.

Each error carries a machine-readable ``kind`` returned to the client next to
the human-readable ``detail``.
"""
from fastapi import status


class PortalError(Exception):
    kind = "PortalError"
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, detail: str):
        super().__init__(detail)
        self.detail = detail


# Also a ValueError so pydantic validators can raise it and get a 400.
class InvalidArgument(PortalError, ValueError):
    kind = "InvalidArgument"
    status_code = status.HTTP_400_BAD_REQUEST


class NotFound(PortalError):
    kind = "NotFound"
    status_code = status.HTTP_404_NOT_FOUND


class Forbidden(PortalError):
    kind = "Forbidden"
    status_code = status.HTTP_403_FORBIDDEN


class Conflict(PortalError):
    kind = "Conflict"
    status_code = status.HTTP_409_CONFLICT


STORAGE_FAILURE = "StorageFailure"
