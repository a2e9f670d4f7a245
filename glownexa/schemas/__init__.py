from .contact import ContactRequest, ContactResponse
from .user import (
    UserCreate, UserLogin, PasswordReset, EmailVerification,
    UserResponse, TokenResponse, MessageResponse
)
from .skin_analysis import (
    SkinAnalysisCreate, HairAnalysisCreate, SkinAnalysisUpdate,
    SaveAnalysisResponse, SkinAnalysisResponse, AnalysisHistoryResponse
)
from .media import UploadResponse, DeleteResponse

__all__ = [
    # Contact schemas
    "ContactRequest", "ContactResponse",
    # User schemas
    "UserCreate", "UserLogin", "PasswordReset", "EmailVerification",
    "UserResponse", "TokenResponse", "MessageResponse",
    # Analysis schemas
    "SkinAnalysisCreate", "HairAnalysisCreate", "SkinAnalysisUpdate",
    "SaveAnalysisResponse", "SkinAnalysisResponse", "AnalysisHistoryResponse",
    # Media schemas
    "UploadResponse", "DeleteResponse"
]
