"""Shared pytest fixtures: in-memory database, test settings, fake media host, authenticated client."""
import uuid

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app.auth import create_access_token, hash_password
from app.config import Settings, get_settings
from app.database import Base, build_engine, get_db
from app.exceptions import DeleteFailed, UploadFailed
from app.main import app
from app.models import User
from app.services.media_hosting import MediaUploadResult, get_media_client

TEST_PASSWORD = "s3cret-pass"


class FakeMediaClient:
    """In-memory stand-in for the Cloudinary client."""

    def __init__(self):
        self.assets: dict[str, bytes] = {}
        self.fail_uploads: set[str] = set()
        self.fail_destroy = False
        self.destroyed: list[str] = []

    def upload(self, stream, filename):
        if filename in self.fail_uploads:
            raise UploadFailed(filename, error="simulated media host failure")
        data = stream.read()
        public_id = f"videos/{uuid.uuid4().hex}"
        self.assets[public_id] = data
        return MediaUploadResult(
            public_id=public_id,
            url=f"https://res.cloudinary.com/demo/video/upload/v1700000000/{public_id}.mp4",
            size=len(data),
            format="mp4",
        )

    def destroy(self, public_id):
        if self.fail_destroy:
            raise DeleteFailed(error="simulated media host failure")
        self.destroyed.append(public_id)
        self.assets.pop(public_id, None)

    def ping(self):
        return {"status": "ok"}


@pytest.fixture
def settings() -> Settings:
    return Settings(
        database_url="sqlite://",
        secret_key="test-secret-key",
        max_file_size_bytes=20 * 1024 * 1024,
        max_files_per_upload=3,
        enable_demo_user=True,
        demo_user_email="demo@example.com",
        demo_user_password="demo-pass",
    )


@pytest.fixture
def db_session():
    engine = build_engine("sqlite://", poolclass=StaticPool)
    Base.metadata.create_all(engine)
    TestingSession = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    session = TestingSession()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(engine)
        engine.dispose()


@pytest.fixture
def media() -> FakeMediaClient:
    return FakeMediaClient()


@pytest.fixture
def client(db_session, settings, media):
    app.dependency_overrides[get_db] = lambda: db_session
    app.dependency_overrides[get_settings] = lambda: settings
    app.dependency_overrides[get_media_client] = lambda: media
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


@pytest.fixture
def user_factory(db_session):
    def _create_user(email: str | None = None, password: str = TEST_PASSWORD) -> User:
        user = User(
            email=email or f"user-{uuid.uuid4().hex[:8]}@example.com",
            password_hash=hash_password(password),
        )
        db_session.add(user)
        db_session.commit()
        db_session.refresh(user)
        return user

    return _create_user


@pytest.fixture
def user(user_factory) -> User:
    return user_factory(email="u1@example.com")


@pytest.fixture
def other_user(user_factory) -> User:
    return user_factory(email="u2@example.com")


@pytest.fixture
def auth_headers(settings):
    def _headers(u: User) -> dict[str, str]:
        return {"Authorization": f"Bearer {create_access_token(u.id, u.email, settings)}"}

    return _headers
