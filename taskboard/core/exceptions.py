"""
Domain Exceptions Module

Every failure the service layer reports derives from TaskboardError. The API
layer maps each class to an HTTP status in taskboard.main; services never
raise HTTPException themselves.
"""


class TaskboardError(Exception):
    """Base exception for all domain and backend failures."""

    status_code = 400

    def __init__(self, detail: str = None):
        super().__init__(detail or self.__doc__)
        self.detail = detail or self.__doc__


class AuthError(TaskboardError):
    """Invalid email or password."""

    status_code = 401


class AccountDeactivatedError(TaskboardError):
    """This account has been deactivated. Contact an administrator."""

    status_code = 403


class PermissionDeniedError(TaskboardError):
    """The user does not have enough privileges."""

    status_code = 403


class NotFoundError(TaskboardError):
    """The requested record does not exist."""

    status_code = 404


class ValidationError(TaskboardError):
    """A required field is missing or invalid."""

    status_code = 422


class QueryError(TaskboardError):
    """The backend could not complete the query."""

    status_code = 502


class WriteError(TaskboardError):
    """The backend rejected the write."""

    status_code = 502


class DataFetchError(TaskboardError):
    """Failed to load data."""

    status_code = 502


class BackendUnavailableError(TaskboardError):
    """The backend service is unavailable."""

    status_code = 503


class NotifyError(TaskboardError):
    """The push notification could not be delivered."""

    status_code = 502
