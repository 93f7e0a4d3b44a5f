"""Application configuration using Pydantic Settings."""
from functools import lru_cache
from typing import Optional
from pydantic import Field, computed_field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings (read from environment variables or .env)."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Application
    APP_NAME: str = Field("homerecall")
    ENVIRONMENT: str = Field("development")
    DEBUG: bool = Field(False)
    API_V1_PREFIX: str = Field("/api/v1")
    APP_URL: str = Field("http://localhost:3000", description="Base URL used for public feedback links")
    LOG_LEVEL: str = Field("INFO")

    # Database
    DB_USER: str = Field("postgres")
    DB_PASSWORD: str = Field("postgres")
    DB_HOST: str = Field("localhost")
    DB_PORT: int = Field(5432)
    DB_NAME: str = Field("homerecall")
    DB_POOL_SIZE: int = Field(5)
    DB_MAX_OVERFLOW: int = Field(10)
    DATABASE_URL_OVERRIDE: Optional[str] = Field(None)

    @computed_field
    @property
    def DATABASE_URL(self) -> str:
        if self.DATABASE_URL_OVERRIDE:
            return self.DATABASE_URL_OVERRIDE
        return (
            f"postgresql://{self.DB_USER}:{self.DB_PASSWORD}"
            f"@{self.DB_HOST}:{self.DB_PORT}/{self.DB_NAME}"
        )

    # AWS / S3
    AWS_ACCESS_KEY_ID: Optional[str] = Field(None)
    AWS_SECRET_ACCESS_KEY: Optional[str] = Field(None)
    S3_REGION: str = Field("us-east-1")
    S3_ENDPOINT_URL: Optional[str] = Field(None)
    RECALL_BUCKET: str = Field("recall")
    SHOWING_PHOTOS_BUCKET: str = Field("showing-photos")

    # Upload policies
    RECALL_MAX_PHOTO_BYTES: int = Field(5 * 1024 * 1024)
    RECALL_MAX_PHOTOS_PER_LOG: int = Field(8)
    RECALL_SIGNED_URL_TTL: int = Field(600)
    SHOWING_MAX_PHOTO_BYTES: int = Field(10 * 1024 * 1024)
    SHOWING_MAX_PHOTOS: int = Field(10)
    SHOWING_SIGNED_URL_TTL: int = Field(3600)
    TRASH_SESSION_IDLE_SECONDS: int = Field(3600, description="Idle trash sessions are forgotten after this long")

    # Auth
    JWT_SECRET_KEY: str = Field("change-me")
    JWT_ALGORITHM: str = Field("HS256")
    ACCESS_TOKEN_EXPIRE_MINUTES: int = Field(60)

    # Twilio
    TWILIO_ACCOUNT_SID: Optional[str] = Field(None)
    TWILIO_AUTH_TOKEN: Optional[str] = Field(None)
    TWILIO_PHONE_NUMBER: Optional[str] = Field(None)

    @property
    def twilio_configured(self) -> bool:
        return bool(self.TWILIO_ACCOUNT_SID and self.TWILIO_AUTH_TOKEN and self.TWILIO_PHONE_NUMBER)

    def public_feedback_url(self, public_token: str) -> str:
        return f"{self.APP_URL.rstrip('/')}/r/{public_token}"


@lru_cache
def get_settings() -> Settings:
    return Settings()


settings = get_settings()
