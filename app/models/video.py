"""Metadata shadow of a video stored at the media host. The bytes live at Cloudinary, not here."""
import uuid
from datetime import datetime
from sqlalchemy import Column, String, Integer, DateTime, ForeignKey
from sqlalchemy.orm import relationship, validates
from app.database import Base


class Video(Base):
    __tablename__ = "videos"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    original_name = Column(String(255), nullable=False)
    filename = Column(String(512), nullable=False)  # media host public id
    url = Column(String(1024), nullable=False)  # durable secure URL
    size = Column(Integer, nullable=False)  # bytes
    format = Column(String(50), nullable=False)  # mp4, webm, ...
    user_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    upload_date = Column(DateTime, nullable=False, default=datetime.utcnow, index=True)
    public_id = Column(String(512), nullable=False)

    owner = relationship("User", back_populates="videos")

    @validates("original_name", "filename", "url", "format", "user_id", "public_id")
    def _require_value(self, key, value):
        if not value:
            raise ValueError(f"Video.{key} is required")
        return value

    @validates("size")
    def _validate_size(self, key, value):
        if value is None or value < 0:
            raise ValueError("Video.size must be a non-negative integer")
        return value
