from pydantic import BaseModel, Field
from typing import Optional, List, Literal
from datetime import datetime

class _AnalysisCreateBase(BaseModel):
    age: int = Field(..., ge=1, le=120)
    gender: str = Field(..., min_length=1)
    original_file_name: Optional[str] = None
    image_url: str = Field(..., min_length=1)
    public_id: Optional[str] = None
    ai_response: str = Field(..., min_length=1)

class SkinAnalysisCreate(_AnalysisCreateBase):
    skin_type: str = Field(..., min_length=1)
    prompt: Optional[str] = None

class HairAnalysisCreate(_AnalysisCreateBase):
    hair_type: str = Field(..., min_length=1)

class AnalysisFeedbackUpdate(BaseModel):
    rating: Optional[int] = Field(None, ge=1, le=5)
    comment: Optional[str] = None

class SkinAnalysisUpdate(BaseModel):
    status: Optional[Literal["completed", "archived"]] = None
    feedback: Optional[AnalysisFeedbackUpdate] = None

class SaveAnalysisResponse(BaseModel):
    success: bool = True
    analysis_id: str

class UserDetailsResponse(BaseModel):
    age: int
    gender: str
    skin_type: Optional[str] = None
    hair_type: Optional[str] = None

class ImageDataResponse(BaseModel):
    original_file_name: Optional[str] = None
    image_url: str
    public_id: Optional[str] = None
    thumbnail_url: Optional[str] = None

class AIAnalysisResponse(BaseModel):
    prompt: Optional[str] = None
    response: str
    analysis_date: Optional[datetime] = None
    model_used: Optional[str] = None

class AnalysisMetadataResponse(BaseModel):
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    status: str = "completed"

class SkinAnalysisResponse(BaseModel):
    id: str
    user_id: str
    analysis_type: str = "skin"
    user_details: UserDetailsResponse
    image_data: ImageDataResponse
    ai_analysis: AIAnalysisResponse
    metadata: AnalysisMetadataResponse
    feedback: Optional[AnalysisFeedbackUpdate] = None

class AnalysisHistoryResponse(BaseModel):
    success: bool = True
    analyses: List[SkinAnalysisResponse]
