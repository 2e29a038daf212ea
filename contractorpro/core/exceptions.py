"""Custom exception classes for the ContractorPro API."""

from typing import Any, Optional

from fastapi import status


class ContractorProError(Exception):
    """Base exception for ContractorPro."""

    status_code: int = status.HTTP_400_BAD_REQUEST

    def __init__(self, message: str = "An error occurred"):
        self.message = message
        super().__init__(self.message)

    def to_body(self) -> dict:
        return {"message": self.message}


class AuthenticationError(ContractorProError):
    """Raised when no principal can be established for a request."""
    status_code = status.HTTP_401_UNAUTHORIZED


class AuthorizationError(ContractorProError):
    """Raised when an authenticated principal lacks the required role or permission."""
    status_code = status.HTTP_403_FORBIDDEN


class ResourceNotFoundError(ContractorProError):
    """Raised when a requested resource is not found."""
    status_code = status.HTTP_404_NOT_FOUND


class ResourceConflictError(ContractorProError):
    """Raised when a resource already exists or is in the wrong state."""
    status_code = status.HTTP_409_CONFLICT


class ValidationError(ContractorProError):
    """Raised when input validation fails."""

    def __init__(self, message: str = "Validation failed", issues: Optional[Any] = None):
        super().__init__(message)
        self.issues = issues

    def to_body(self) -> dict:
        body = super().to_body()
        if self.issues is not None:
            body["issues"] = self.issues
        return body


class SnapshotError(ContractorProError):
    """Raised when an activity snapshot cannot be produced."""
    status_code = status.HTTP_503_SERVICE_UNAVAILABLE
