"""
Domain exceptions raised by the service layer.

Routes keep raising HTTPException for request validation. Services raise
these instead, and main.py turns them into JSON responses.
"""

from typing import Any, Dict, Optional

from fastapi import Request
from fastapi.responses import JSONResponse


class StudentPathError(Exception):
    """
    Base exception for StudentPath services.
    Carries an HTTP status and a machine-readable code.
    """

    def __init__(
        self,
        message: str,
        code: str = "STUDENTPATH_ERROR",
        status_code: int = 500,
        suggestion: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.status_code = status_code
        self.suggestion = suggestion
        self.details = details or {}

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to API response dict."""
        result = {
            "detail": self.message,
            "code": self.code,
        }
        if self.suggestion:
            result["suggestion"] = self.suggestion
        if self.details:
            result["details"] = self.details
        return result


# ==================== GENERIC ====================

class NotFoundError(StudentPathError):
    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message, code="NOT_FOUND", status_code=404, details=details)


class ConflictError(StudentPathError):
    def __init__(self, message: str):
        super().__init__(message, code="CONFLICT", status_code=409)


class ValidationFailedError(StudentPathError):
    def __init__(self, message: str, suggestion: Optional[str] = None):
        super().__init__(message, code="VALIDATION_FAILED", status_code=400, suggestion=suggestion)


class AuthenticationError(StudentPathError):
    def __init__(self, message: str = "Not authenticated"):
        super().__init__(message, code="UNAUTHENTICATED", status_code=401)


class PermissionDeniedError(StudentPathError):
    def __init__(self, message: str = "Forbidden"):
        super().__init__(message, code="FORBIDDEN", status_code=403)


class RateLimitExceededError(StudentPathError):
    def __init__(self, message: str = "Rate limit exceeded. Please try again in a moment."):
        super().__init__(message, code="RATE_LIMITED", status_code=429)


# ==================== INTEGRATIONS ====================

class ExternalServiceError(StudentPathError):
    """Raised when the LLM, object storage or SMTP relay fails."""

    def __init__(self, service: str, message: str, status_code: int = 502):
        super().__init__(
            message,
            code="EXTERNAL_SERVICE_ERROR",
            status_code=status_code,
            details={"service": service},
        )


# ==================== CAREER TRACKS ====================

class TaskAlreadyCompletedError(StudentPathError):
    """Raised when a task is missing from the plan or was already completed."""

    def __init__(self, task_id: int):
        super().__init__(
            "Task not found or already completed",
            code="TASK_NOT_FOUND",
            status_code=404,
            details={"task_id": task_id},
        )


async def studentpath_exception_handler(request: Request, exc: StudentPathError) -> JSONResponse:
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())
