"""Custom exception classes"""

from typing import Any, Dict, Optional
from fastapi import HTTPException, status


class StatementAnalysisException(Exception):
    """Base exception class for the statement analysis service"""

    status_code: int = status.HTTP_400_BAD_REQUEST

    def __init__(
        self,
        message: str,
        details: Optional[Dict[str, Any]] = None
    ):
        self.message = message
        self.details = details or {}
        super().__init__(self.message)


class ValidationError(StatementAnalysisException):
    """Validation error exception"""
    pass


class AuthenticationError(StatementAnalysisException):
    """Authentication error exception"""
    status_code = status.HTTP_401_UNAUTHORIZED


class AuthorizationError(StatementAnalysisException):
    """Authorization error exception"""
    status_code = status.HTTP_403_FORBIDDEN


class NotFoundError(StatementAnalysisException):
    """Requested resource does not exist"""
    status_code = status.HTTP_404_NOT_FOUND


class FileProcessingError(StatementAnalysisException):
    """File processing error exception"""
    pass


class ExternalServiceError(StatementAnalysisException):
    """External service error exception"""
    status_code = status.HTTP_502_BAD_GATEWAY


class ExtractionError(ExternalServiceError):
    """The AI extraction call failed or returned unusable content.

    Never retried here; the caller decides whether to re-submit the batch.
    """
    pass


class MergeInputError(ValidationError):
    """An analysis handed to the merge engine is missing required sections"""
    status_code = status.HTTP_422_UNPROCESSABLE_ENTITY


class DatabaseError(StatementAnalysisException):
    """Database operation error exception"""
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR


# HTTP Exception factories
def create_http_exception(
    status_code: int,
    message: str,
    details: Optional[Dict[str, Any]] = None
) -> HTTPException:
    """Create HTTP exception with consistent format"""
    return HTTPException(
        status_code=status_code,
        detail={
            "message": message,
            "details": details or {}
        }
    )


def unauthorized_exception(message: str = "Authentication required") -> HTTPException:
    """Create unauthorized exception"""
    return create_http_exception(status.HTTP_401_UNAUTHORIZED, message)

