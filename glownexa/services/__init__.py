from .mail_service import mail_service
from .cloudinary_service import cloudinary_service
from .auth_service import auth_service
from .analysis_service import analysis_service

__all__ = [
    "mail_service",
    "cloudinary_service",
    "auth_service",
    "analysis_service"
]
