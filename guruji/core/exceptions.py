"""Custom exception classes."""

from typing import Any, Dict, Optional

from guruji.schemas.chat import ErrorCode


class GurujiException(Exception):
    """Base exception for the Guruji relay."""

    def __init__(
        self,
        message: str,
        status_code: int = 500,
        code: ErrorCode = ErrorCode.SERVER_ERROR,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        self.message = message
        self.status_code = status_code
        self.code = code
        self.details = details or {}
        super().__init__(self.message)


class InvalidRequestError(GurujiException):
    """Malformed client payload."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None) -> None:
        super().__init__(
            message,
            status_code=400,
            code=ErrorCode.INVALID_REQUEST,
            details=details,
        )


class NotFoundError(GurujiException):
    """Resource not found exception."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None) -> None:
        super().__init__(
            message, status_code=404, code=ErrorCode.NOT_FOUND, details=details
        )


class UpstreamError(GurujiException):
    """Completion API failure, already mapped to an error code."""

    def __init__(
        self,
        message: str,
        code: ErrorCode = ErrorCode.API_ERROR,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        super().__init__(message, status_code=503, code=code, details=details)
