"""
Video upload, listing, download and delete for the authenticated owner.
Bytes live at Cloudinary; download redirects to the (optionally quality-reduced) delivery URL.
"""
from urllib.parse import quote
from fastapi import APIRouter, Depends, Query, Request
from fastapi.responses import RedirectResponse
from starlette.datastructures import UploadFile
from sqlalchemy.orm import Session
from app.auth import get_current_user
from app.config import Settings, get_settings
from app.database import get_db
from app.exceptions import PayloadTooLarge
from app.models.user import User
from app.schemas.user import MessageResponse
from app.schemas.video import Quality, UploadResponse, VideoResponse
from app.services.media_hosting import MediaHostingClient, get_media_client
from app.services.video_service import IncomingFile, VideoService, get_video_service

router = APIRouter(prefix="/api/videos", tags=["videos"])

# Slack per file for multipart boundaries and part headers.
MULTIPART_PART_OVERHEAD = 16 * 1024


def _upload_size(file: UploadFile) -> int:
    """Byte size of a spooled upload; measured from the stream when the parser did not record it."""
    if file.size is not None:
        return file.size
    stream = file.file
    pos = stream.tell()
    stream.seek(0, 2)
    size = stream.tell()
    stream.seek(pos)
    return size


def _declared_length(request: Request) -> int:
    try:
        return int(request.headers.get("content-length", "0"))
    except ValueError:
        return 0


def _attachment_disposition(filename: str) -> str:
    safe_name = filename.replace('"', "")
    try:
        safe_name.encode("latin-1")
    except UnicodeEncodeError:
        return f"attachment; filename*=UTF-8''{quote(safe_name)}"
    return f'attachment; filename="{safe_name}"'


def _to_incoming(file: UploadFile) -> IncomingFile:
    return IncomingFile(
        filename=file.filename or "video",
        content_type=file.content_type or "",
        size=_upload_size(file),
        stream=file.file,
    )


@router.post("/upload", response_model=UploadResponse)
async def upload_videos(
    request: Request,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
    service: VideoService = Depends(get_video_service),
):
    """Upload up to N video files (multipart field `videos`) to the media host and save their metadata."""
    # Auth has already run; bodies that cannot fit the limits are refused before they are spooled.
    limit = settings.max_files_per_upload * (settings.max_file_size_bytes + MULTIPART_PART_OVERHEAD)
    if _declared_length(request) > limit:
        raise PayloadTooLarge("Upload too large")

    async with request.form(max_files=settings.max_files_per_upload) as form:
        # Browsers send an empty part when no file was picked.
        files = [
            _to_incoming(part)
            for part in form.getlist("videos")
            if isinstance(part, UploadFile) and part.filename
        ]
        saved = await service.upload(db, user.id, files)
    return UploadResponse(
        message="Videos uploaded successfully",
        videos=[VideoResponse.model_validate(v) for v in saved],
    )


@router.get("", response_model=list[VideoResponse])
async def list_videos(
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
    service: VideoService = Depends(get_video_service),
):
    """Current user's videos, newest first."""
    items = await service.list_videos(db, user.id)
    return [VideoResponse.model_validate(v) for v in items]


@router.get("/test-cloudinary")
def test_cloudinary(media: MediaHostingClient = Depends(get_media_client)):
    """Check connectivity and credentials against the media host."""
    return {"message": "Cloudinary connection OK", "cloudinary": media.ping()}


@router.get("/download/{video_id}")
async def download_video(
    video_id: str,
    quality: Quality = Query(Quality.ORIGINAL),
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
    service: VideoService = Depends(get_video_service),
):
    """Redirect to the video's delivery URL at the requested quality, as an attachment."""
    url, filename = await service.resolve_download(db, user.id, video_id, quality)
    return RedirectResponse(
        url=url,
        status_code=302,
        headers={"Content-Disposition": _attachment_disposition(filename)},
    )


@router.delete("/{video_id}", response_model=MessageResponse)
async def delete_video(
    video_id: str,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
    service: VideoService = Depends(get_video_service),
):
    await service.delete(db, user.id, video_id)
    return MessageResponse(message="Video deleted successfully")
