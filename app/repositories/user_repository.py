"""Credential store: user lookups and creation. Sync; callers commit through these functions."""
from sqlalchemy import func
from sqlalchemy.orm import Session

from app.models.user import User


def get_user_by_email(db: Session, email: str) -> User | None:
    normalized = email.strip().lower()
    return db.query(User).filter(func.lower(User.email) == normalized).first()


def get_user_by_id(db: Session, user_id: str) -> User | None:
    return db.query(User).filter(User.id == user_id).first()


def create_user(db: Session, email: str, password_hash: str) -> User:
    user = User(email=email.strip().lower(), password_hash=password_hash)
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


class UserRepository:
    """Thin wrapper for dependency injection; delegates to module functions."""

    @staticmethod
    def get_by_email(db: Session, email: str) -> User | None:
        return get_user_by_email(db, email)

    @staticmethod
    def get_by_id(db: Session, user_id: str) -> User | None:
        return get_user_by_id(db, user_id)

    @staticmethod
    def create(db: Session, email: str, password_hash: str) -> User:
        return create_user(db, email, password_hash)
