"""
Video metadata persistence. Every read and delete is scoped by owner: a row owned by someone else
is indistinguishable from a missing row.
All operations are sync (run_in_executor from the async service).
"""
from sqlalchemy import desc
from sqlalchemy.orm import Session

from app.models.video import Video


def create_videos(db: Session, videos: list[Video]) -> list[Video]:
    """Persist all rows in one transaction; on failure nothing is written."""
    try:
        db.add_all(videos)
        db.commit()
    except Exception:
        db.rollback()
        raise
    for v in videos:
        db.refresh(v)
    return videos


def list_videos_for_owner(db: Session, owner_id: str) -> list[Video]:
    return (
        db.query(Video)
        .filter(Video.user_id == owner_id)
        .order_by(desc(Video.upload_date))
        .all()
    )


def get_owned_video(db: Session, owner_id: str, video_id: str) -> Video | None:
    return db.query(Video).filter(Video.id == video_id, Video.user_id == owner_id).first()


def delete_video(db: Session, video: Video) -> None:
    try:
        db.delete(video)
        db.commit()
    except Exception:
        db.rollback()
        raise


class VideoRepository:
    """Thin wrapper for dependency injection; delegates to module functions."""

    @staticmethod
    def create_many(db: Session, videos: list[Video]) -> list[Video]:
        return create_videos(db, videos)

    @staticmethod
    def list_for_owner(db: Session, owner_id: str) -> list[Video]:
        return list_videos_for_owner(db, owner_id)

    @staticmethod
    def get_owned(db: Session, owner_id: str, video_id: str) -> Video | None:
        return get_owned_video(db, owner_id, video_id)

    @staticmethod
    def delete(db: Session, video: Video) -> None:
        return delete_video(db, video)
