from .user import UserModel, CurrentUser, PyObjectId
from .skin_analysis import (
    SkinAnalysisModel, AnalysisType, AnalysisStatus, UserDetails,
    ImageData, AIAnalysis, AnalysisMetadata, AnalysisFeedback
)

__all__ = [
    "UserModel", "CurrentUser", "PyObjectId",
    "SkinAnalysisModel", "AnalysisType", "AnalysisStatus", "UserDetails",
    "ImageData", "AIAnalysis", "AnalysisMetadata", "AnalysisFeedback"
]
