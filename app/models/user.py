import uuid
from datetime import datetime
from sqlalchemy import Column, String, DateTime
from sqlalchemy.orm import relationship, validates
from app.database import Base


class User(Base):
    __tablename__ = "users"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    email = Column(String(255), unique=True, nullable=False, index=True)
    password_hash = Column(String(255), nullable=False)  # argon2, never plaintext
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)

    videos = relationship("Video", back_populates="owner", passive_deletes=True)

    @validates("email", "password_hash")
    def _require_value(self, key, value):
        if not value:
            raise ValueError(f"User.{key} is required")
        return value
