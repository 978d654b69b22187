import enum
from datetime import datetime, timezone
from pydantic import BaseModel, field_serializer
from pydantic.alias_generators import to_camel


class Quality(str, enum.Enum):
    ORIGINAL = "original"
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class VideoResponse(BaseModel):
    """Wire shape of a Video record (camelCase keys)."""
    id: str
    original_name: str
    filename: str
    url: str
    size: int
    format: str
    user_id: str
    upload_date: datetime
    public_id: str

    class Config:
        from_attributes = True
        alias_generator = to_camel
        populate_by_name = True

    @field_serializer("upload_date")
    def _serialize_upload_date(self, value: datetime) -> str:
        # Stored naive in UTC; emit an explicit offset so clients do not read it as local time.
        if value.tzinfo is None:
            value = value.replace(tzinfo=timezone.utc)
        return value.isoformat()


class UploadResponse(BaseModel):
    message: str
    videos: list[VideoResponse]
