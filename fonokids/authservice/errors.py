from __future__ import annotations
from typing import Any, Dict, Optional
from .contracts import AuthErrorCodes

class AuthServiceError(Exception):
    type: str = "INTERNAL"
    code: str = AuthErrorCodes.INTERNAL
    message: str = "Internal server error"
    status_code: int = 500

    def __init__(self, message: Optional[str] = None, *, details: Optional[Dict[str, Any]] = None):
        if message:
            self.message = message
        self.details = details
        super().__init__(self.message)

class ValidationError(AuthServiceError):
    type = "VALIDATION"
    code = "validation_error"
    message = "Invalid request"
    status_code = 400

class MissingFieldsError(ValidationError):
    code = AuthErrorCodes.MISSING_FIELDS
    message = "All fields are required"

class InvalidOrExpiredCodeError(ValidationError):
    code = AuthErrorCodes.INVALID_OR_EXPIRED_CODE
    message = "Invalid or expired code"

class PasswordTooLongError(ValidationError):
    code = AuthErrorCodes.PASSWORD_TOO_LONG
    message = "Password must be at most 72 bytes"

class NotFoundError(AuthServiceError):
    type = "NOT_FOUND"
    code = AuthErrorCodes.NOT_FOUND
    message = "Resource not found"
    status_code = 404

class ConflictError(AuthServiceError):
    type = "CONFLICT"
    code = AuthErrorCodes.CONFLICT
    message = "Username or email already exists"
    status_code = 400

class AuthenticationError(AuthServiceError):
    type = "AUTH_ERROR"
    code = "auth_failed"
    message = "Authentication failed"
    status_code = 401

class InvalidCredentialsError(AuthenticationError):
    code = AuthErrorCodes.BAD_CREDENTIALS
    message = "Invalid credentials"

class NoPasswordSetError(AuthenticationError):
    code = AuthErrorCodes.NO_PASSWORD_SET
    message = "Account has no password configured"

class MissingTokenError(AuthenticationError):
    code = AuthErrorCodes.MISSING_TOKEN
    message = "Access token required"

class InvalidTokenError(AuthenticationError):
    code = AuthErrorCodes.INVALID_TOKEN
    message = "Invalid token"
    status_code = 403

class TokenExpiredError(InvalidTokenError):
    code = AuthErrorCodes.TOKEN_EXPIRED
    message = "Token expired"

class DeliveryError(AuthServiceError):
    type = "UPSTREAM"
    code = AuthErrorCodes.DELIVERY_FAILED
    message = "Could not send recovery code"
    status_code = 500

class InternalError(AuthServiceError):
    pass

class ConfigError(RuntimeError):
    """Fatal misconfiguration detected while building the service at startup."""
