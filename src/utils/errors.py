"""
Error types for the Task Tracker API
Each error carries the HTTP status code the API boundary responds with
"""
from typing import Dict, List, Optional


class AppError(Exception):
    """Base class for errors that map onto an API response"""
    status_code: int = 500
    default_message: str = "Something went wrong!"

    def __init__(self, message: Optional[str] = None, errors: Optional[List[Dict[str, str]]] = None):
        self.message = message or self.default_message
        self.errors = errors
        super().__init__(self.message)


class ValidationFailedError(AppError):
    """Raised when user input fails validation"""
    status_code = 400
    default_message = "Validation failed"


class UnauthenticatedError(AppError):
    """Raised when a request carries no usable identity"""
    status_code = 401
    default_message = "Authentication required"


class NotFoundError(AppError):
    """Raised when a resource is absent or owned by someone else"""
    status_code = 404
    default_message = "Resource not found"


class TaskNotFoundException(NotFoundError):
    """Raised when a task is not found for the requesting owner"""
    default_message = "Task not found"

    def __init__(self, task_id: str):
        self.task_id = task_id
        super().__init__()


class UserNotFoundException(NotFoundError):
    """Raised when a user record is not found"""
    default_message = "User not found"


class ConflictError(AppError):
    """Raised when a write would violate a uniqueness constraint"""
    status_code = 409
    default_message = "Username or email already exists"


class ServiceUnavailableError(AppError):
    """Raised when a dependent capability is not configured"""
    status_code = 503
    default_message = "Service unavailable"


class InternalServerError(AppError):
    """Raised for unexpected failures; the message is safe to show clients"""
    status_code = 500


__all__ = [
    "AppError",
    "ValidationFailedError",
    "UnauthenticatedError",
    "NotFoundError",
    "TaskNotFoundException",
    "UserNotFoundException",
    "ConflictError",
    "ServiceUnavailableError",
    "InternalServerError",
]
