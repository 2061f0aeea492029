"""
Error hierarchy shared by all group/team services.

Services raise these; app.main maps them to HTTP responses.
"""


class GroupsError(Exception):
    """Base class."""
    status_code = 500

    def __init__(self, detail: str = ""):
        super().__init__(detail)
        self.detail = detail


class InvalidInputError(GroupsError):
    status_code = 400


class NotAuthorizedError(GroupsError):
    status_code = 403


class NotFoundError(GroupsError):
    status_code = 404


class ConflictError(GroupsError):
    status_code = 409


class BackendError(GroupsError):
    status_code = 502


class BackendTimeoutError(BackendError):
    status_code = 504
