from pydantic import BaseModel, Field
from typing import Optional
from datetime import datetime
from enum import Enum
from bson import ObjectId
from .user import PyObjectId
from glownexa.utils.date_utils import get_utc_now

class AnalysisType(str, Enum):
    SKIN = "skin"
    HAIR = "hair"

class AnalysisStatus(str, Enum):
    COMPLETED = "completed"
    ARCHIVED = "archived"

class UserDetails(BaseModel):
    """Demographics the user entered alongside the photo"""
    age: int
    gender: str
    skin_type: Optional[str] = None  # skin analyses only
    hair_type: Optional[str] = None  # hair analyses only

class ImageData(BaseModel):
    original_file_name: Optional[str] = None
    image_url: str
    public_id: Optional[str] = None  # media host identifier, needed for delete/transform

class AIAnalysis(BaseModel):
    prompt: Optional[str] = None
    response: str
    analysis_date: datetime = Field(default_factory=get_utc_now)
    model_used: str

class AnalysisMetadata(BaseModel):
    created_at: datetime = Field(default_factory=get_utc_now)
    updated_at: datetime = Field(default_factory=get_utc_now)
    status: str = AnalysisStatus.COMPLETED.value  # see AnalysisStatus

class AnalysisFeedback(BaseModel):
    rating: Optional[int] = None  # 1-5
    comment: Optional[str] = None

class SkinAnalysisModel(BaseModel):
    """A skin or hair analysis; both live in the skin_analyses collection"""
    model_config = {
        "arbitrary_types_allowed": True,
        "populate_by_name": True,
        "use_enum_values": True,
        "json_encoders": {ObjectId: str, datetime: lambda v: v.isoformat()}
    }

    id: Optional[PyObjectId] = Field(default=None, alias="_id")
    user_id: str
    analysis_type: AnalysisType

    user_details: UserDetails
    image_data: ImageData
    ai_analysis: AIAnalysis
    metadata: AnalysisMetadata = Field(default_factory=AnalysisMetadata)

    feedback: Optional[AnalysisFeedback] = None

    def to_document(self) -> dict:
        """Dump for insert_one; MongoDB assigns _id"""
        return self.model_dump(exclude={"id"}, exclude_none=True)
