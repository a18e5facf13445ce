from typing import Optional


class HoldASpotException(Exception):
    """Base exception for Hold a Spot application"""
    status_code = 500
    code = "internal_error"

    def __init__(self, message: str, details: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.details = details


class ValidationError(HoldASpotException):
    """Exception raised for validation errors"""
    status_code = 400
    code = "validation_error"


class InsufficientCreditsError(ValidationError):
    """Exception raised when a booking costs more than the user can spend"""
    code = "insufficient_credits"


class AuthenticationError(HoldASpotException):
    """Exception raised for authentication errors"""
    status_code = 401
    code = "unauthorized"


class NotFoundError(HoldASpotException):
    """Exception raised when a referenced record does not exist"""
    status_code = 404
    code = "not_found"


class ConflictError(HoldASpotException):
    """Exception raised when a time slot is already taken"""
    status_code = 409
    code = "conflict"


class ConfigurationError(HoldASpotException):
    """Exception raised for missing server configuration"""
    code = "configuration_error"


class DatabaseError(HoldASpotException):
    """Exception raised for database errors"""
    code = "database_error"