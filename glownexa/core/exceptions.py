from typing import Optional

from fastapi import HTTPException, status

class GlowNexaException(Exception):
    """Base exception for GlowNexa API"""
    pass

class AuthProviderError(GlowNexaException):
    """Raised when the identity provider rejects a request"""

    def __init__(self, code: str, message: str, status_code: int = status.HTTP_400_BAD_REQUEST):
        super().__init__(message)
        self.code = code
        self.message = message
        self.status_code = status_code

class MailDeliveryError(GlowNexaException):
    """Raised when the SMTP transport fails to deliver a message"""
    pass

class MediaConfigurationError(GlowNexaException):
    """Raised when media hosting credentials are missing"""
    pass

class MediaValidationError(GlowNexaException):
    """Raised when an uploaded file is rejected before upload"""
    pass

class MediaUploadError(GlowNexaException):
    """Raised when the media host rejects an upload or delete"""
    pass

class RateLimitExceeded(GlowNexaException):
    """Raised when a client exceeds its request window"""

    def __init__(self, retry_after: int, message: Optional[str] = None):
        super().__init__(message or "Too many requests, try again later.")
        self.retry_after = retry_after
        self.message = message or "Too many requests, try again later."

# Common HTTP exceptions
def not_found(detail: str = "Resource not found"):
    return HTTPException(
        status_code=status.HTTP_404_NOT_FOUND,
        detail=detail
    )

def bad_request(detail: str = "Bad request"):
    return HTTPException(
        status_code=status.HTTP_400_BAD_REQUEST,
        detail=detail
    )

def unauthorized(detail: str = "Could not validate credentials"):
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"}
    )

def forbidden(detail: str = "Forbidden"):
    return HTTPException(
        status_code=status.HTTP_403_FORBIDDEN,
        detail=detail
    )

def service_unavailable(detail: str = "Service unavailable"):
    return HTTPException(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        detail=detail
    )

def bad_gateway(detail: str = "Upstream service error"):
    return HTTPException(
        status_code=status.HTTP_502_BAD_GATEWAY,
        detail=detail
    )
