from fastapi import APIRouter, Depends, HTTPException, status
from pymongo.database import Database
from typing import Any, Dict
import logging

from glownexa.api.deps import get_db, get_current_active_user
from glownexa.models.user import CurrentUser
from glownexa.schemas.skin_analysis import (
    SkinAnalysisCreate,
    HairAnalysisCreate,
    SkinAnalysisUpdate,
    SaveAnalysisResponse,
    SkinAnalysisResponse,
    AnalysisHistoryResponse,
)
from glownexa.services.analysis_service import analysis_service
from glownexa.services.cloudinary_service import cloudinary_service
from glownexa.utils.date_utils import parse_timestamp

logger = logging.getLogger(__name__)

router = APIRouter()

def to_response(analysis: Dict[str, Any]) -> SkinAnalysisResponse:
    """Shape a stored document for the client, adding a thumbnail when the image is hosted"""
    image_data = dict(analysis.get("image_data") or {})
    image_data["thumbnail_url"] = cloudinary_service.generate_url(
        image_data.get("public_id"), width=300, height=300, crop="fill", quality="auto"
    )

    ai_analysis = dict(analysis.get("ai_analysis") or {})
    ai_analysis["analysis_date"] = parse_timestamp(ai_analysis.get("analysis_date"))

    metadata = dict(analysis.get("metadata") or {})
    metadata["created_at"] = parse_timestamp(metadata.get("created_at"))
    metadata["updated_at"] = parse_timestamp(metadata.get("updated_at"))

    return SkinAnalysisResponse(
        id=str(analysis["_id"]),
        user_id=analysis["user_id"],
        # Records without a tag predate hair analysis
        analysis_type=analysis.get("analysis_type") or "skin",
        user_details=analysis.get("user_details") or {},
        image_data=image_data,
        ai_analysis=ai_analysis,
        metadata=metadata,
        feedback=analysis.get("feedback"),
    )

@router.post("/skin", response_model=SaveAnalysisResponse, status_code=status.HTTP_201_CREATED)
async def save_skin_analysis(
    analysis_in: SkinAnalysisCreate,
    current_user: CurrentUser = Depends(get_current_active_user),
    db: Database = Depends(get_db)
):
    """Store a completed skin analysis"""
    analysis_id = analysis_service.save_skin_analysis(db, current_user.uid, analysis_in)
    return SaveAnalysisResponse(analysis_id=analysis_id)

@router.post("/hair", response_model=SaveAnalysisResponse, status_code=status.HTTP_201_CREATED)
async def save_hair_analysis(
    analysis_in: HairAnalysisCreate,
    current_user: CurrentUser = Depends(get_current_active_user),
    db: Database = Depends(get_db)
):
    """Store a completed hair analysis"""
    analysis_id = analysis_service.save_hair_analysis(db, current_user.uid, analysis_in)
    return SaveAnalysisResponse(analysis_id=analysis_id)

@router.get("", response_model=AnalysisHistoryResponse)
async def get_user_analyses(
    current_user: CurrentUser = Depends(get_current_active_user),
    db: Database = Depends(get_db)
):
    """Get the user's skin and hair analyses, newest first"""
    analyses = analysis_service.get_user_analyses(db, current_user.uid)
    return AnalysisHistoryResponse(analyses=[to_response(analysis) for analysis in analyses])

@router.get("/{analysis_id}", response_model=SkinAnalysisResponse)
async def get_analysis_detail(
    analysis_id: str,
    current_user: CurrentUser = Depends(get_current_active_user),
    db: Database = Depends(get_db)
):
    analysis = analysis_service.get_analysis(db, current_user.uid, analysis_id)
    if not analysis:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Analysis not found"
        )
    return to_response(analysis)

@router.patch("/{analysis_id}", response_model=SaveAnalysisResponse)
async def update_analysis(
    analysis_id: str,
    update: SkinAnalysisUpdate,
    current_user: CurrentUser = Depends(get_current_active_user),
    db: Database = Depends(get_db)
):
    """Update status or attach feedback"""
    if not analysis_service.update_analysis(db, current_user.uid, analysis_id, update):
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Analysis not found"
        )
    return SaveAnalysisResponse(analysis_id=analysis_id)
