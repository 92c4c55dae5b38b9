"""API error taxonomy.

Services raise these; the error handler registered in create_app() rolls
back the session and renders them as
``{"success": false, "error": {"code": ..., "message": ...}}``.
"""


class ApiError(Exception):
    """Base class for errors surfaced verbatim to the caller."""

    status_code = 500
    code = "internal"
    default_message = "An internal error occurred."

    def __init__(self, message=None):
        self.message = message or self.default_message
        super().__init__(self.message)

    def to_dict(self):
        return {
            "success": False,
            "error": {"code": self.code, "message": self.message},
        }


class Unauthenticated(ApiError):
    status_code = 401
    code = "unauthenticated"
    default_message = "User must be authenticated."


class InvalidArgument(ApiError):
    status_code = 400
    code = "invalid-argument"
    default_message = "Invalid argument."


class PermissionDenied(ApiError):
    status_code = 403
    code = "permission-denied"
    default_message = "Permission denied."


class NotFound(ApiError):
    status_code = 404
    code = "not-found"
    default_message = "Not found."


class AlreadyExists(ApiError):
    status_code = 409
    code = "already-exists"
    default_message = "Already exists."


class FailedPrecondition(ApiError):
    status_code = 409
    code = "failed-precondition"
    default_message = "Operation not allowed in the current state."


class Internal(ApiError):
    status_code = 500
    code = "internal"
