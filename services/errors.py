class ServiceError(Exception):
    """Base class for errors that map onto an HTTP response."""

    status_code = 500
    code = "InternalError"

    def __init__(self, message: str, code: str = None, details=None):
        super().__init__(message)
        self.message = message
        if code:
            self.code = code
        self.details = details

    def to_dict(self):
        out = {"error": self.message, "code": self.code}
        if self.details:
            out["details"] = self.details
        return out


class ValidationError(ServiceError):
    status_code = 400
    code = "ValidationError"


class NotFound(ServiceError):
    status_code = 404
    code = "NotFound"


class Conflict(ServiceError):
    # duplicate booking and double cancel answer 400, like the rest of the API
    status_code = 400
    code = "Conflict"


class Forbidden(ServiceError):
    status_code = 403
    code = "Forbidden"


class UpstreamUnavailable(ServiceError):
    status_code = 502
    code = "UpstreamUnavailable"


class InternalError(ServiceError):
    status_code = 500
    code = "InternalError"
