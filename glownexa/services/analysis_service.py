import logging
from datetime import datetime
from typing import Any, Dict, List, Optional

from bson import ObjectId
from bson.errors import InvalidId
from pymongo.database import Database

from glownexa.core.config import settings
from glownexa.core.monitoring import analyses_saved_total, track_db_operation
from glownexa.database import SKIN_ANALYSES
from glownexa.models.skin_analysis import (
    AIAnalysis,
    AnalysisMetadata,
    AnalysisType,
    ImageData,
    SkinAnalysisModel,
    UserDetails,
)
from glownexa.schemas.skin_analysis import (
    HairAnalysisCreate,
    SkinAnalysisCreate,
    SkinAnalysisUpdate,
)
from glownexa.utils.date_utils import get_utc_now, parse_timestamp

logger = logging.getLogger(__name__)

_OLDEST = datetime.min


def hair_prompt(age: int, gender: str, hair_type: str) -> str:
    return f"Hair analysis for {age} year old {gender} with {hair_type} hair"


def _created_at(analysis: Dict[str, Any]) -> datetime:
    metadata = analysis.get("metadata") or {}
    return parse_timestamp(metadata.get("created_at")) or _OLDEST


def _to_object_id(analysis_id: str) -> Optional[ObjectId]:
    try:
        return ObjectId(analysis_id)
    except (InvalidId, TypeError):
        return None


class AnalysisService:
    """Skin and hair analysis records, one collection for a unified history"""

    def _insert(self, db: Database, analysis: SkinAnalysisModel) -> str:
        result = db[SKIN_ANALYSES].insert_one(analysis.to_document())
        analyses_saved_total.labels(analysis_type=analysis.analysis_type).inc()
        logger.info(f"{analysis.analysis_type.capitalize()} analysis saved with ID: {result.inserted_id}")
        return str(result.inserted_id)

    @staticmethod
    def _image_data(data) -> ImageData:
        return ImageData(
            original_file_name=data.original_file_name,
            image_url=data.image_url,
            public_id=data.public_id,
        )

    @track_db_operation("insert", SKIN_ANALYSES)
    def save_skin_analysis(self, db: Database, user_id: str, data: SkinAnalysisCreate) -> str:
        now = get_utc_now()
        analysis = SkinAnalysisModel(
            user_id=user_id,
            analysis_type=AnalysisType.SKIN,
            user_details=UserDetails(age=data.age, gender=data.gender, skin_type=data.skin_type),
            image_data=self._image_data(data),
            ai_analysis=AIAnalysis(
                prompt=data.prompt,
                response=data.ai_response,
                analysis_date=now,
                model_used=settings.AI_MODEL_NAME,
            ),
            metadata=AnalysisMetadata(created_at=now, updated_at=now),
        )
        return self._insert(db, analysis)

    @track_db_operation("insert", SKIN_ANALYSES)
    def save_hair_analysis(self, db: Database, user_id: str, data: HairAnalysisCreate) -> str:
        now = get_utc_now()
        analysis = SkinAnalysisModel(
            user_id=user_id,
            analysis_type=AnalysisType.HAIR,
            user_details=UserDetails(age=data.age, gender=data.gender, hair_type=data.hair_type),
            image_data=self._image_data(data),
            ai_analysis=AIAnalysis(
                prompt=hair_prompt(data.age, data.gender, data.hair_type),
                response=data.ai_response,
                analysis_date=now,
                model_used=settings.AI_MODEL_NAME,
            ),
            metadata=AnalysisMetadata(created_at=now, updated_at=now),
        )
        return self._insert(db, analysis)

    @track_db_operation("find", SKIN_ANALYSES)
    def get_user_analyses(self, db: Database, user_id: str) -> List[Dict[str, Any]]:
        """All of a user's analyses, newest first"""
        analyses = list(db[SKIN_ANALYSES].find({"user_id": user_id}))
        # Sorted here because legacy records hold ISO strings rather than dates
        analyses.sort(key=_created_at, reverse=True)
        return analyses

    @track_db_operation("find_one", SKIN_ANALYSES)
    def get_analysis(self, db: Database, user_id: str, analysis_id: str) -> Optional[Dict[str, Any]]:
        oid = _to_object_id(analysis_id)
        if oid is None:
            return None
        return db[SKIN_ANALYSES].find_one({"_id": oid, "user_id": user_id})

    @track_db_operation("update", SKIN_ANALYSES)
    def update_analysis(
        self,
        db: Database,
        user_id: str,
        analysis_id: str,
        update: SkinAnalysisUpdate,
    ) -> bool:
        """Apply status/feedback changes; the type tag and owner never change"""
        oid = _to_object_id(analysis_id)
        if oid is None:
            return False

        changes: Dict[str, Any] = {"metadata.updated_at": get_utc_now()}
        if update.status is not None:
            changes["metadata.status"] = update.status
        if update.feedback is not None:
            changes["feedback"] = update.feedback.model_dump(exclude_none=True)

        result = db[SKIN_ANALYSES].update_one({"_id": oid, "user_id": user_id}, {"$set": changes})
        if result.matched_count == 0:
            return False

        logger.info(f"Updated analysis {analysis_id}")
        return True

    @track_db_operation("find_one", SKIN_ANALYSES)
    def is_image_owned_by(self, db: Database, user_id: str, public_id: str) -> bool:
        return db[SKIN_ANALYSES].find_one(
            {"user_id": user_id, "image_data.public_id": public_id},
            {"_id": 1},
        ) is not None


analysis_service = AnalysisService()
