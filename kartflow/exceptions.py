"""
Custom exception classes for the KartFlow console.

Backend transport failures, rejected form input, order workflow violations
and access-control redirects each get their own type so that route handlers
can turn them into the right toast, inline error or redirect.
"""

from typing import Any, Dict, List, Optional


class ConsoleException(Exception):
    """
    Base exception for all console errors.

    All custom exceptions inherit from this class for consistent error handling.
    """

    def __init__(
        self,
        message: str,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        """
        Initialize console exception.

        Args:
            message: Human-readable error message
            details: Additional context about the error
        """
        self.message = message
        self.details = details or {}
        super().__init__(self.message)


class ServiceUnavailableException(ConsoleException):
    """
    Exception raised when the backend cannot be reached.

    Used for connection refusals and other transport-level failures.
    """

    def __init__(
        self,
        service_name: str,
        message: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        """
        Initialize service unavailable exception.

        Args:
            service_name: Name of the unavailable service
            message: Optional custom error message
            details: Additional context about the error
        """
        self.service_name = service_name
        default_message = f"Service '{service_name}' is currently unavailable"
        super().__init__(message or default_message, details)


class BackendTimeoutException(ConsoleException):
    """Exception raised when a backend request exceeds the configured timeout."""

    def __init__(
        self,
        method: str,
        path: str,
        timeout_seconds: float,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        self.method = method
        self.path = path
        self.timeout_seconds = timeout_seconds
        message = f"Backend request {method} {path} timed out after {timeout_seconds}s"
        super().__init__(message, details)


class BackendRequestException(ConsoleException):
    """
    Exception raised when the backend answers with a non-success status.

    Attributes:
        status_code: HTTP status code returned by the backend
        payload: Parsed JSON error body, or None when the body was not JSON
    """

    def __init__(
        self,
        method: str,
        path: str,
        status_code: int,
        payload: Any = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        self.method = method
        self.path = path
        self.status_code = status_code
        self.payload = payload
        message = f"Backend returned {status_code} for {method} {path}"
        super().__init__(message, details)

    @property
    def is_not_found(self) -> bool:
        return self.status_code == 404

    def error_detail(self) -> Optional[str]:
        """Return the backend's ``detail`` message when it sent one."""
        if isinstance(self.payload, dict):
            detail = self.payload.get("detail")
            if detail:
                return str(detail)
        return None


class BackendResponseException(ConsoleException):
    """
    Exception raised when a successful backend response cannot be used.

    Covers bodies that are not JSON and records that do not fit the
    console's models.
    """

    def __init__(
        self,
        operation: str,
        reason: str,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        self.operation = operation
        self.reason = reason
        super().__init__(f"Unusable backend response for {operation}: {reason}", details)


class ValidationException(ConsoleException):
    """
    Exception raised when form input fails validation.

    Carries the complete field-to-message mapping so a form can be
    re-rendered with every error at once.
    """

    def __init__(
        self,
        errors: Dict[str, str],
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        self.errors = dict(errors)
        fields = ", ".join(sorted(self.errors))
        message = f"Validation failed for: {fields}"
        super().__init__(message, details)


class InvalidStatusTransition(ConsoleException):
    """Raised when an order status change is not allowed by the transition table."""

    def __init__(
        self,
        current_status: str,
        target_status: str,
        allowed: Optional[List[str]] = None,
    ) -> None:
        self.current_status = current_status
        self.target_status = target_status
        self.allowed = list(allowed or [])
        message = f"Cannot change order status from '{current_status}' to '{target_status}'"
        super().__init__(
            message,
            details={
                "current_status": current_status,
                "target_status": target_status,
                "allowed": self.allowed,
            },
        )


class InsufficientStockException(ConsoleException):
    """Raised when a cart line asks for more units than the product has in stock."""

    def __init__(self, message: str, available: int, requested: int) -> None:
        self.available = available
        self.requested = requested
        super().__init__(
            message, details={"available": available, "requested": requested}
        )


class AuthenticationRequired(ConsoleException):
    """Raised by route guards when no user is signed in."""

    def __init__(self, path: Optional[str] = None) -> None:
        self.path = path
        super().__init__("Authentication required", details={"path": path})


class PermissionDenied(ConsoleException):
    """Raised by route guards when the signed-in user lacks the required role."""

    def __init__(self, required_role: str, path: Optional[str] = None) -> None:
        self.required_role = required_role
        self.path = path
        super().__init__(
            f"Role '{required_role}' required",
            details={"required_role": required_role, "path": path},
        )
