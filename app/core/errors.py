from typing import Any

class AppError(Exception):
    # error_code selects the HTTP status in exception_handlers
    error_code = "APP_ERROR"

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def to_dict(self) -> dict[str, Any]:
        return {"error": self.error_code, "message": self.message, "details": self.details}

class NotFound(AppError):
    error_code = "NOT_FOUND"

class InvalidOperation(AppError):
    error_code = "INVALID_OPERATION"

class Conflict(AppError):
    error_code = "CONFLICT"
