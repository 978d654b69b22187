from pydantic_settings import BaseSettings
from functools import lru_cache


class Settings(BaseSettings):
    # Database
    database_url: str = "sqlite:///./app.db"

    # Cloudinary (media hosting)
    cloudinary_cloud_name: str = ""
    cloudinary_api_key: str = ""
    cloudinary_api_secret: str = ""
    cloudinary_folder: str = "videos"
    cloudinary_chunk_size: int = 6_000_000  # 6 MB chunks for large uploads
    cloudinary_timeout: int = 120  # seconds

    # JWT
    secret_key: str = "your-secret-key-change-in-production"
    algorithm: str = "HS256"
    access_token_expire_minutes: int = 60 * 24 * 7  # 7 days

    # Upload limits
    max_file_size_bytes: int = 500 * 1024 * 1024  # 500 MB
    max_files_per_upload: int = 10

    # Frontend URL for CORS
    frontend_url: str = "http://localhost:3000"

    # Server
    port: int = 3000
    debug: bool = False  # include exception text in 500 responses
    log_level: str = "INFO"

    # Demo account bootstrap (development only; off unless a password is configured)
    enable_demo_user: bool = False
    demo_user_email: str = "demo@example.com"
    demo_user_password: str = ""

    class Config:
        env_file = ".env"
        frozen = True


@lru_cache
def get_settings() -> Settings:
    return Settings()
