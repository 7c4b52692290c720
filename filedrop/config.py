"""Global application settings."""
from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import List, Optional


class Settings(BaseSettings):
    """Application configuration with environment variable support."""

    # Service Info
    APP_NAME: str = "filedrop"
    VERSION: str = "0.1.0"
    DEBUG: bool = False

    # Server
    HOST: str = "0.0.0.0"
    PORT: int = 5000

    # Durable storage
    UPLOAD_DIR: str = "uploads"

    # Redis metadata cache
    REDIS_URL: str = "redis://localhost:6379"
    REDIS_SOCKET_TIMEOUT: float = 2.0  # seconds, per cache round-trip
    RECORD_CACHE_TTL_SECONDS: int = 3600  # 1 hour
    LISTING_CACHE_TTL_SECONDS: int = 300  # 5 minutes

    # Upload policy
    MAX_FILE_SIZE_MB: int = 100
    ALLOWED_FILE_TYPES: List[str] = [
        # Documents
        'application/pdf',
        # Images
        'image/jpeg', 'image/png', 'image/gif', 'image/webp',
        # Videos
        'video/mp4', 'video/mpeg', 'video/quicktime',
    ]

    # Downloads
    DOWNLOAD_CHUNK_SIZE: int = 64 * 1024  # 64KB chunks

    # Logging
    LOG_LEVEL: str = "INFO"
    LOGGING_HOST: Optional[str] = None  # Central log sink (disabled when unset)
    LOGGING_PORT: int = 9999

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=True
    )

    @property
    def max_file_size_bytes(self) -> int:
        return self.MAX_FILE_SIZE_MB * 1024 * 1024

    def model_post_init(self, __context) -> None:
        """Validate settings after initialization (Pydantic v2)."""
        positive = {
            'RECORD_CACHE_TTL_SECONDS': self.RECORD_CACHE_TTL_SECONDS,
            'LISTING_CACHE_TTL_SECONDS': self.LISTING_CACHE_TTL_SECONDS,
            'MAX_FILE_SIZE_MB': self.MAX_FILE_SIZE_MB,
            'DOWNLOAD_CHUNK_SIZE': self.DOWNLOAD_CHUNK_SIZE,
        }

        for setting_name, value in positive.items():
            if value <= 0:
                raise ValueError(f"{setting_name} must be positive, got {value}")


settings = Settings()
