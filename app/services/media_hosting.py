"""
Cloudinary wrapper: stores video bytes, deletes them by public id, and derives quality variants
by rewriting the delivery URL. Credentials are passed per call; the SDK's global config is never touched.
The SDK is blocking; VideoService runs these calls in an executor.
"""
import logging
from dataclasses import dataclass
from typing import Any, BinaryIO

import cloudinary.api
import cloudinary.uploader
from cloudinary.exceptions import Error as CloudinaryError
from fastapi import Depends

from app.config import Settings, get_settings
from app.exceptions import DeleteFailed, MediaHostingError, UploadFailed
from app.schemas.video import Quality

logger = logging.getLogger(__name__)

RESOURCE_TYPE = "video"
UPLOAD_SEGMENT = "/upload/"
QUALITY_TRANSFORMATIONS = {
    Quality.HIGH: "q_80",
    Quality.MEDIUM: "q_60",
    Quality.LOW: "q_40",
}
# Cloudinary answers "not found" when the asset is already gone; treated as deleted.
DESTROY_OK_RESULTS = {"ok", "not found"}


@dataclass(frozen=True)
class MediaUploadResult:
    public_id: str
    url: str
    size: int
    format: str


def quality_url(url: str, quality: Quality) -> str:
    """Insert the quality transformation right after the /upload/ segment. Original quality is untouched."""
    if quality == Quality.ORIGINAL:
        return url
    head, sep, tail = url.partition(UPLOAD_SEGMENT)
    if not sep:
        logger.warning("URL has no %s segment, serving original quality: %s", UPLOAD_SEGMENT, url)
        return url
    return f"{head}{UPLOAD_SEGMENT}{QUALITY_TRANSFORMATIONS[quality]}/{tail}"


class MediaHostingClient:
    def __init__(self, settings: Settings):
        self._folder = settings.cloudinary_folder
        self._chunk_size = settings.cloudinary_chunk_size
        self._timeout = settings.cloudinary_timeout
        self._credentials = {
            "cloud_name": settings.cloudinary_cloud_name,
            "api_key": settings.cloudinary_api_key,
            "api_secret": settings.cloudinary_api_secret,
        }

    def upload(self, stream: BinaryIO, filename: str) -> MediaUploadResult:
        """Stream one file to Cloudinary. Raises UploadFailed carrying the file name."""
        try:
            result = cloudinary.uploader.upload_large(
                stream,
                resource_type=RESOURCE_TYPE,
                folder=self._folder,
                chunk_size=self._chunk_size,
                timeout=self._timeout,
                **self._credentials,
            )
        except CloudinaryError as e:
            logger.error("Cloudinary upload failed for %s: %s", filename, e)
            raise UploadFailed(filename, error=str(e)) from e

        try:
            return MediaUploadResult(
                public_id=result["public_id"],
                url=result["secure_url"],
                size=int(result["bytes"]),
                format=result["format"],
            )
        except (KeyError, TypeError, ValueError) as e:
            logger.error("Unexpected Cloudinary upload response for %s: %s", filename, result)
            raise UploadFailed(filename, error=f"incomplete upload response: {e}") from e

    def destroy(self, public_id: str) -> None:
        try:
            result = cloudinary.uploader.destroy(
                public_id,
                resource_type=RESOURCE_TYPE,
                timeout=self._timeout,
                **self._credentials,
            )
        except CloudinaryError as e:
            logger.error("Cloudinary delete failed for %s: %s", public_id, e)
            raise DeleteFailed(error=str(e)) from e
        outcome = (result or {}).get("result")
        if outcome not in DESTROY_OK_RESULTS:
            logger.error("Cloudinary delete for %s returned %r", public_id, outcome)
            raise DeleteFailed(error=f"unexpected result: {outcome}")
        if outcome == "not found":
            logger.warning("Cloudinary asset %s was already gone", public_id)

    def ping(self) -> dict[str, Any]:
        try:
            return dict(cloudinary.api.ping(timeout=self._timeout, **self._credentials))
        except CloudinaryError as e:
            raise MediaHostingError("Cloudinary connection failed", error=str(e)) from e


def get_media_client(settings: Settings = Depends(get_settings)) -> MediaHostingClient:
    return MediaHostingClient(settings)
