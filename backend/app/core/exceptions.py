class AppError(Exception):
    """Base class for all application exceptions."""
    def __init__(self, message: str, status_code: int = 500, details: dict = None):
        self.message = message
        self.status_code = status_code
        self.details = details or {}
        super().__init__(self.message)

class NotFoundError(AppError):
    """Raised when a record is missing or not owned by the caller.

    Both cases share this error so non-owners cannot test for existence.
    """
    def __init__(self, message: str, details: dict = None):
        super().__init__(message, status_code=404, details=details)

class InvalidRequestError(AppError):
    """Raised when well-formed input is rejected by a business rule."""
    def __init__(self, message: str, details: dict = None):
        super().__init__(message, status_code=400, details=details)

class StoreError(AppError):
    """Raised when the record store itself fails."""
    def __init__(self, message: str, details: dict = None):
        super().__init__(message, status_code=500, details=details)
