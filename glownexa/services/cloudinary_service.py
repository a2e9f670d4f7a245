import hashlib
import logging
import time
from typing import Any, Dict, Optional

import httpx

from glownexa.core.config import settings
from glownexa.core.exceptions import (
    MediaConfigurationError,
    MediaUploadError,
    MediaValidationError,
)
from glownexa.utils.date_utils import get_utc_now

logger = logging.getLogger(__name__)

ALLOWED_CONTENT_TYPES = ("image/jpeg", "image/jpg", "image/png", "image/webp")
UPLOAD_FOLDER = "skin_analysis"
UPLOAD_TAGS = "skin_analysis,glownexa"

# transformation option -> url prefix, in url order
_TRANSFORM_PREFIXES = (
    ("width", "w"),
    ("height", "h"),
    ("quality", "q"),
    ("format", "f"),
    ("crop", "c"),
)


class CloudinaryService:
    """Image hosting through Cloudinary's REST API"""

    def __init__(self, client: Optional[httpx.AsyncClient] = None):
        self.cloud_name = settings.CLOUDINARY_CLOUD_NAME
        self.upload_preset = settings.CLOUDINARY_UPLOAD_PRESET
        self.api_key = settings.CLOUDINARY_API_KEY
        self.api_secret = settings.CLOUDINARY_API_SECRET
        self.max_size = settings.MAX_UPLOAD_BYTES
        self.client = client

    @property
    def api_url(self) -> str:
        return f"https://api.cloudinary.com/v1_1/{self.cloud_name}/image"

    def _http(self) -> httpx.AsyncClient:
        if self.client is None:
            self.client = httpx.AsyncClient(timeout=60.0)
        return self.client

    def validate_file(self, data: Optional[bytes], content_type: Optional[str]) -> None:
        """Reject uploads before any network call"""
        if not self.cloud_name or not self.upload_preset:
            raise MediaConfigurationError(
                "Cloudinary configuration is incomplete. Please check your environment variables."
            )

        if not data:
            raise MediaValidationError("No file provided")

        if len(data) > self.max_size:
            raise MediaValidationError(f"File size exceeds {self.max_size // (1024 * 1024)}MB limit")

        if content_type not in ALLOWED_CONTENT_TYPES:
            raise MediaValidationError("File type not supported. Please upload JPG, PNG, or WebP images.")

    async def upload_image(
        self,
        data: bytes,
        filename: Optional[str],
        content_type: Optional[str],
    ) -> Dict[str, Any]:
        """
        Unsigned upload using the configured preset.

        Returns the hosted url, public id and the image facts Cloudinary reports.
        """
        self.validate_file(data, content_type)

        form = {
            "upload_preset": self.upload_preset,
            "folder": UPLOAD_FOLDER,
            "tags": UPLOAD_TAGS,
            "context": f"upload_date={get_utc_now().isoformat()}Z|source=glownexa_app",
        }
        files = {"file": (filename or "upload", data, content_type)}

        try:
            response = await self._http().post(f"{self.api_url}/upload", data=form, files=files)
        except httpx.HTTPError as e:
            logger.error(f"Cloudinary upload error: {e}")
            raise MediaUploadError(f"Upload failed: {e}") from e

        if response.status_code >= 400:
            reason = self._error_message(response)
            logger.error(f"Cloudinary upload error: {response.status_code} - {reason}")
            raise MediaUploadError(f"Upload failed: {reason}")

        payload = response.json()
        logger.info(f"Uploaded image {payload.get('public_id')} ({payload.get('bytes')} bytes)")

        return {
            "url": payload.get("secure_url"),
            "public_id": payload.get("public_id"),
            "format": payload.get("format"),
            "bytes": payload.get("bytes"),
            "width": payload.get("width"),
            "height": payload.get("height"),
            "created_at": payload.get("created_at"),
            "resource_type": payload.get("resource_type"),
        }

    def generate_url(self, public_id: Optional[str], **transformations: Any) -> Optional[str]:
        """Delivery URL with optional w_/h_/q_/f_/c_ transformations"""
        if not self.cloud_name or not public_id:
            return None

        parts = [
            f"{prefix}_{transformations[option]}"
            for option, prefix in _TRANSFORM_PREFIXES
            if transformations.get(option)
        ]
        transform = f"/{','.join(parts)}" if parts else ""

        return f"https://res.cloudinary.com/{self.cloud_name}/image/upload{transform}/{public_id}"

    def _sign(self, params: Dict[str, Any]) -> str:
        # Cloudinary signs the sorted key=value pairs followed by the API secret
        to_sign = "&".join(f"{key}={params[key]}" for key in sorted(params))
        return hashlib.sha1(f"{to_sign}{self.api_secret}".encode("utf-8")).hexdigest()

    async def delete_image(self, public_id: str) -> bool:
        """
        Signed destroy of an uploaded image.

        Returns False when Cloudinary no longer has the image.
        """
        if not self.cloud_name or not self.api_key or not self.api_secret:
            raise MediaConfigurationError("Delete functionality requires Cloudinary API credentials")

        params = {"public_id": public_id, "timestamp": int(time.time())}
        form = {**params, "api_key": self.api_key, "signature": self._sign(params)}

        try:
            response = await self._http().post(f"{self.api_url}/destroy", data=form)
        except httpx.HTTPError as e:
            logger.error(f"Cloudinary delete error: {e}")
            raise MediaUploadError(f"Delete failed: {e}") from e

        if response.status_code >= 400:
            reason = self._error_message(response)
            logger.error(f"Cloudinary delete error: {response.status_code} - {reason}")
            raise MediaUploadError(f"Delete failed: {reason}")

        result = response.json().get("result")
        logger.info(f"Cloudinary destroy {public_id}: {result}")
        return result == "ok"

    @staticmethod
    def _error_message(response: httpx.Response) -> str:
        try:
            return response.json().get("error", {}).get("message") or response.reason_phrase
        except ValueError:
            return response.reason_phrase


cloudinary_service = CloudinaryService()
