"""
Custom application exceptions
"""

from typing import Optional, Dict, Any


class PixStayException(Exception):
    """Base exception for PixStay application"""

    def __init__(
        self,
        message: str,
        code: str,
        status_code: int = 400,
        details: Optional[Dict[str, Any]] = None
    ):
        self.message = message
        self.code = code
        self.status_code = status_code
        self.details = details or {}
        super().__init__(self.message)

    def to_response(self) -> Dict[str, Any]:
        body: Dict[str, Any] = {"ok": False, "error": self.message}
        if self.details:
            body["details"] = self.details
        return body


class ValidationError(PixStayException):
    """Malformed or missing request fields"""

    def __init__(self, message: str, field: Optional[str] = None):
        details = {"field": field} if field else {}
        super().__init__(
            message=message,
            code="VALIDATION_ERROR",
            status_code=400,
            details=details
        )


class NotFoundError(PixStayException):
    """Resource not found errors"""

    def __init__(self, resource: str, identifier: Any = None):
        message = f"{resource} not found"
        if identifier:
            message = f"{resource} with id {identifier} not found"
        super().__init__(
            message=message,
            code="NOT_FOUND",
            status_code=404
        )


class ConflictError(PixStayException):
    """Resource conflict errors"""

    def __init__(self, message: str, details: Optional[Dict] = None):
        super().__init__(
            message=message,
            code="CONFLICT",
            status_code=409,
            details=details
        )


class ConfigurationError(PixStayException):
    """Missing credentials or backend configuration"""

    def __init__(self, message: str = "Service is not configured"):
        super().__init__(
            message=message,
            code="CONFIGURATION_ERROR",
            status_code=500
        )


class PersistenceError(PixStayException):
    """A call to the database failed"""

    def __init__(self, message: str = "Database operation failed", operation: Optional[str] = None):
        # operation stays out of details so it never leaks into client responses
        self.operation = operation
        super().__init__(
            message=message,
            code="PERSISTENCE_ERROR",
            status_code=500
        )


class InternalError(PixStayException):
    """Unexpected failure converted at the handler boundary"""

    def __init__(self, message: str = "Internal error"):
        super().__init__(
            message=message,
            code="INTERNAL_ERROR",
            status_code=500
        )


class GatewayRejectionError(PixStayException):
    """Payment gateway answered with a non-success HTTP status"""

    def __init__(self, message: str = "Failed to create transaction", details: Optional[Dict] = None):
        super().__init__(
            message=message,
            code="GATEWAY_REJECTED",
            status_code=502,
            details=details
        )


class GatewayTimeoutError(PixStayException):
    """Payment gateway did not answer in time"""

    def __init__(self, service: str, timeout: float):
        super().__init__(
            message=f"Payment gateway {service} did not respond within {timeout:g}s",
            code="GATEWAY_TIMEOUT",
            status_code=504,
            details={"service": service}
        )
