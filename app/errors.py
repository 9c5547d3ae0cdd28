# app/errors.py
from typing import Optional, List, Dict, Any


class AppError(Exception):
    """Base class for classified errors; carries the HTTP status to respond with."""

    def __init__(self, message: str, status_code: int = 500, errors: Optional[List[str]] = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.errors = list(errors) if errors else []

    def to_dict(self) -> Dict[str, Any]:
        body: Dict[str, Any] = {"success": False, "message": self.message}
        # only include the detail list when there is something in it
        if self.errors:
            body["errors"] = self.errors
        return body


class NotFoundError(AppError):
    def __init__(self, message: str = "Resource not found."):
        super().__init__(message, 404)


class ValidationError(AppError):
    def __init__(self, message: str = "Validation failed.", errors: Optional[List[str]] = None):
        super().__init__(message, 400, errors)


class AuthenticationError(AppError):
    def __init__(self, message: str = "Unauthorized: Invalid or missing API Key."):
        super().__init__(message, 401)


class ConfigurationError(AppError):
    def __init__(self, message: str = "Server configuration error: API_KEY not set."):
        super().__init__(message, 500)
