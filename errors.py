"""
Error taxonomy shared by the record operations and the HTTP layer.

Operations raise these; main.py turns them into
``{"error": <kind>, "message": <text>}`` responses.
"""


class ServiceError(Exception):
    status_code = 500
    kind = "internal_error"

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class ValidationFailed(ServiceError):
    status_code = 400
    kind = "validation_error"


class NotFound(ServiceError):
    status_code = 404
    kind = "not_found"


class DuplicateRecord(ServiceError):
    status_code = 400
    kind = "duplicate"


class InvalidCredentials(ServiceError):
    status_code = 401
    kind = "invalid_credentials"


class Forbidden(ServiceError):
    status_code = 403
    kind = "forbidden"
