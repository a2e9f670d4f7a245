from .security import verify_id_token, get_firebase_app

from .exceptions import (
    GlowNexaException,
    AuthProviderError,
    MailDeliveryError,
    MediaConfigurationError,
    MediaValidationError,
    MediaUploadError,
    RateLimitExceeded,
    not_found,
    bad_request,
    unauthorized,
    forbidden,
    service_unavailable,
    bad_gateway
)

__all__ = [
    # Security
    "verify_id_token",
    "get_firebase_app",
    # Exceptions
    "GlowNexaException",
    "AuthProviderError",
    "MailDeliveryError",
    "MediaConfigurationError",
    "MediaValidationError",
    "MediaUploadError",
    "RateLimitExceeded",
    "not_found",
    "bad_request",
    "unauthorized",
    "forbidden",
    "service_unavailable",
    "bad_gateway"
]
