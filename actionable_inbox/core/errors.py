class ServiceError(Exception):
    """Base class for failures the service layer reports to callers."""

    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(ServiceError):
    """A required field is missing or a value is outside its allowed set."""

    status_code = 400


class NotFoundError(ServiceError):
    status_code = 404
