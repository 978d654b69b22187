"""
Video orchestration: upload fan-out to the media host, metadata writes, listing, download resolution, delete.
- Upload: every file is validated before any transfer; transfers run concurrently and are joined.
  First failure wins; siblings are not cancelled and already-stored sibling assets are not rolled back.
  Metadata is written only when every transfer succeeded, in one transaction.
- Delete: media host first, then the local row. A failed external delete keeps the row.
- Ownership: every lookup is scoped to owner_id; foreign ids are reported as NotFound.
Blocking SDK and DB calls run in the default executor.
"""
import asyncio
import logging
from dataclasses import dataclass
from typing import BinaryIO

from fastapi import Depends
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.config import Settings, get_settings
from app.exceptions import (
    DeleteFailed,
    MediaHostingError,
    NoFilesProvided,
    NotFound,
    PayloadTooLarge,
    StorageError,
    TooManyFiles,
    UnsupportedMediaType,
    UploadFailed,
)
from app.models.video import Video
from app.repositories.video_repository import VideoRepository
from app.schemas.video import Quality
from app.services.media_hosting import MediaHostingClient, MediaUploadResult, get_media_client, quality_url

logger = logging.getLogger(__name__)

VIDEO_MIME_PREFIX = "video/"


@dataclass
class IncomingFile:
    """One uploaded file, detached from the HTTP layer."""
    filename: str
    content_type: str
    size: int
    stream: BinaryIO


class VideoService:
    def __init__(
        self,
        media: MediaHostingClient,
        settings: Settings,
        repository: VideoRepository | None = None,
    ):
        self._media = media
        self._repo = repository or VideoRepository()
        self._max_files = settings.max_files_per_upload
        self._max_size = settings.max_file_size_bytes

    def validate_files(self, files: list[IncomingFile]) -> None:
        if not files:
            raise NoFilesProvided()
        if len(files) > self._max_files:
            raise TooManyFiles(f"At most {self._max_files} files per upload")
        for f in files:
            ct = (f.content_type or "").split(";")[0].strip().lower()
            if not ct.startswith(VIDEO_MIME_PREFIX):
                raise UnsupportedMediaType(f"Only video files are allowed: {f.filename}")
            if f.size > self._max_size:
                max_mb = self._max_size / (1024 * 1024)
                raise PayloadTooLarge(f"File too large: {f.filename} (max {max_mb:.0f} MB)")

    async def _transfer(self, file: IncomingFile) -> MediaUploadResult:
        loop = asyncio.get_event_loop()
        try:
            return await loop.run_in_executor(None, self._media.upload, file.stream, file.filename)
        except UploadFailed:
            raise
        except Exception as e:
            logger.exception("Upload of %s failed", file.filename)
            raise UploadFailed(file.filename, error=str(e)) from e

    async def upload(self, db: Session, owner_id: str, files: list[IncomingFile]) -> list[Video]:
        self.validate_files(files)
        logger.info("Uploading %d file(s) for user %s", len(files), owner_id)

        results = await asyncio.gather(*(self._transfer(f) for f in files))
        logger.info("Media host accepted %d file(s) for user %s", len(results), owner_id)

        try:
            videos = [
                Video(
                    original_name=f.filename,
                    filename=r.public_id,
                    url=r.url,
                    size=r.size,
                    format=r.format,
                    user_id=owner_id,
                    public_id=r.public_id,
                )
                for f, r in zip(files, results)
            ]
        except ValueError as e:
            raise StorageError("Invalid video metadata", error=str(e)) from e

        loop = asyncio.get_event_loop()
        try:
            saved = await loop.run_in_executor(None, self._repo.create_many, db, videos)
        except SQLAlchemyError as e:
            # Assets already stored at the media host are left in place.
            logger.error("Saving metadata for %d video(s) failed: %s", len(videos), e)
            raise StorageError("Failed to save video metadata", error=str(e)) from e
        return saved

    async def list_videos(self, db: Session, owner_id: str) -> list[Video]:
        loop = asyncio.get_event_loop()
        try:
            return await loop.run_in_executor(None, self._repo.list_for_owner, db, owner_id)
        except SQLAlchemyError as e:
            raise StorageError("Failed to load videos", error=str(e)) from e

    async def _get_owned(self, db: Session, owner_id: str, video_id: str) -> Video:
        loop = asyncio.get_event_loop()
        try:
            video = await loop.run_in_executor(None, self._repo.get_owned, db, owner_id, video_id)
        except SQLAlchemyError as e:
            raise StorageError("Failed to load video", error=str(e)) from e
        if video is None:
            raise NotFound()
        return video

    async def resolve_download(
        self, db: Session, owner_id: str, video_id: str, quality: Quality = Quality.ORIGINAL
    ) -> tuple[str, str]:
        """Returns (url to redirect to, suggested download filename)."""
        video = await self._get_owned(db, owner_id, video_id)
        return quality_url(video.url, quality), video.original_name

    async def delete(self, db: Session, owner_id: str, video_id: str) -> None:
        video = await self._get_owned(db, owner_id, video_id)
        loop = asyncio.get_event_loop()
        try:
            await loop.run_in_executor(None, self._media.destroy, video.public_id)
        except MediaHostingError:
            raise
        except Exception as e:
            logger.exception("Deleting media asset %s failed", video.public_id)
            raise DeleteFailed(error=str(e)) from e

        try:
            await loop.run_in_executor(None, self._repo.delete, db, video)
        except SQLAlchemyError as e:
            # External asset is gone; the row now dangles until the delete is retried.
            logger.error("Media asset %s deleted but row %s was not: %s", video.public_id, video.id, e)
            raise StorageError("Failed to delete video record", error=str(e)) from e
        logger.info("Video %s deleted for user %s", video_id, owner_id)


def get_video_service(
    media: MediaHostingClient = Depends(get_media_client),
    settings: Settings = Depends(get_settings),
) -> VideoService:
    return VideoService(media, settings)
