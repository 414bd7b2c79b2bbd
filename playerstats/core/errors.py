from typing import Optional


class ServiceError(Exception):
    """Base error carrying a machine code, a human message and an HTTP status."""

    code: str = "error"
    status_code: int = 500

    def __init__(self, message: str, code: Optional[str] = None, status_code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        if code is not None:
            self.code = code
        if status_code is not None:
            self.status_code = status_code

    def to_dict(self) -> dict:
        return {"code": self.code, "message": self.message}


class NotFoundError(ServiceError):
    code = "not-found"
    status_code = 404


class BadRequestError(ServiceError):
    code = "bad-request"
    status_code = 400


class ForbiddenError(ServiceError):
    code = "forbidden"
    status_code = 403


class ConflictError(ServiceError):
    code = "conflict"
    status_code = 409


class NotLoggedInError(ServiceError):
    code = "not-logged-in"
    status_code = 213


class StorageError(ServiceError):
    code = "storage-error"
    status_code = 500


class ConfigurationIncompleteError(ServiceError):
    code = "api-key-not-found"
    status_code = 211


class UpstreamError(ServiceError):
    code = "upstream-error"
    status_code = 502
