from typing import Optional, Any

class EnrollEaseError(Exception):
    """
    Base exception for EnrollEase application.
    """
    def __init__(self, message: str, code: str = "INTERNAL_ERROR", status_code: int = 500, details: Optional[Any] = None):
        self.message = message
        self.code = code
        self.status_code = status_code
        self.details = details
        super().__init__(self.message)

class ResourceNotFoundError(EnrollEaseError):
    """
    Raised when a requested resource is not found.
    """
    def __init__(self, message: str = "Resource not found", details: Optional[Any] = None):
        super().__init__(message, code="NOT_FOUND", status_code=404, details=details)

class AuthenticationError(EnrollEaseError):
    """
    Raised when authentication fails or no user is signed in.
    """
    def __init__(self, message: str = "Authentication failed", details: Optional[Any] = None):
        super().__init__(message, code="AUTHENTICATION_FAILED", status_code=401, details=details)

class ValidationError(EnrollEaseError):
    """
    Raised when input validation fails.
    """
    def __init__(self, message: str = "Validation error", details: Optional[Any] = None):
        super().__init__(message, code="VALIDATION_ERROR", status_code=422, details=details)

class ExternalServiceError(EnrollEaseError):
    """
    Raised when the course platform API fails.
    """
    def __init__(self, message: str = "External service error", details: Optional[Any] = None):
        super().__init__(message, code="EXTERNAL_SERVICE_ERROR", status_code=502, details=details)

class PreconditionError(EnrollEaseError):
    """
    Raised when an operation is attempted without its inputs in place
    (e.g. paying for a course that has no id).
    """
    def __init__(self, message: str = "Precondition failed", details: Optional[Any] = None):
        super().__init__(message, code="PRECONDITION_FAILED", status_code=400, details=details)

class InvalidTransitionError(EnrollEaseError):
    """
    Raised when a wizard action is not allowed from the current step.
    """
    def __init__(self, message: str = "Invalid step transition", details: Optional[Any] = None):
        super().__init__(message, code="INVALID_TRANSITION", status_code=409, details=details)

class PaymentError(EnrollEaseError):
    """
    Raised when the checkout widget reports a failure or verification is rejected.
    """
    def __init__(self, message: str = "Payment failed", details: Optional[Any] = None):
        super().__init__(message, code="PAYMENT_FAILED", status_code=402, details=details)
