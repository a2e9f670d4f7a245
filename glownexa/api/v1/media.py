from fastapi import APIRouter, Depends, File, UploadFile
from pymongo.database import Database
import logging

from glownexa.api.deps import get_db, get_current_active_user
from glownexa.core.exceptions import (
    MediaConfigurationError, MediaUploadError, MediaValidationError,
    bad_request, bad_gateway, not_found, service_unavailable
)
from glownexa.core.monitoring import media_uploads_total
from glownexa.models.user import CurrentUser
from glownexa.schemas.media import UploadResponse, DeleteResponse
from glownexa.services.analysis_service import analysis_service
from glownexa.services.cloudinary_service import cloudinary_service

logger = logging.getLogger(__name__)

router = APIRouter()

@router.post("/upload", response_model=UploadResponse)
async def upload_image(
    file: UploadFile = File(...),
    current_user: CurrentUser = Depends(get_current_active_user),
):
    """Upload an analysis photo to the media host"""
    # One byte past the limit is enough to reject without reading the whole body
    data = await file.read(cloudinary_service.max_size + 1)

    try:
        result = await cloudinary_service.upload_image(data, file.filename, file.content_type)
    except MediaValidationError as e:
        media_uploads_total.labels(status="rejected").inc()
        raise bad_request(str(e))
    except MediaConfigurationError as e:
        raise service_unavailable(str(e))
    except MediaUploadError as e:
        media_uploads_total.labels(status="failed").inc()
        raise bad_gateway(str(e))

    media_uploads_total.labels(status="uploaded").inc()
    logger.info(f"User {current_user.uid} uploaded {result['public_id']}")
    return UploadResponse(**result)

@router.delete("/{public_id:path}", response_model=DeleteResponse)
async def delete_image(
    public_id: str,
    current_user: CurrentUser = Depends(get_current_active_user),
    db: Database = Depends(get_db)
):
    """Delete a hosted image that belongs to one of the user's analyses"""
    if not analysis_service.is_image_owned_by(db, current_user.uid, public_id):
        raise not_found("Image not found")

    try:
        deleted = await cloudinary_service.delete_image(public_id)
    except MediaConfigurationError as e:
        raise service_unavailable(str(e))
    except MediaUploadError as e:
        raise bad_gateway(str(e))

    if not deleted:
        raise not_found("Image not found")

    return DeleteResponse(public_id=public_id)
