"""Application configuration using Pydantic Settings."""
from typing import Optional
from pydantic import Field, computed_field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings (environment variables override the defaults)."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Application
    APP_NAME: str = Field("gatekeeper")
    ENVIRONMENT: str = Field("development")
    DEBUG: bool = Field(False)
    API_V1_PREFIX: str = Field("/api/v1")
    LOG_LEVEL: str = Field("INFO")

    # Database
    DB_USER: str = Field("postgres")
    DB_PASSWORD: str = Field("postgres")
    DB_HOST: str = Field("localhost")
    DB_PORT: int = Field(5432)
    DB_NAME: str = Field("gate_security")
    DB_POOL_SIZE: int = Field(10)
    DB_MAX_OVERFLOW: int = Field(20)
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

    # Biometric matching
    FACE_MATCH_THRESHOLD: float = Field(1.0, ge=0.0)
    FACE_MATCH_TOP_K: int = Field(5, ge=1)
    FINGERPRINT_MATCH_THRESHOLD: float = Field(0.35, ge=0.0)
    FINGERPRINT_MATCH_TOP_K: int = Field(5, ge=1)

    # Operator search
    SEARCH_CANDIDATE_LIMIT: int = Field(500, ge=1)
    SEARCH_TRIGRAM_THRESHOLD: float = Field(0.3, ge=0.0, le=1.0)

    # Caller-side retries for transient storage failures
    RETRY_MAX_ATTEMPTS: int = Field(3, ge=1)
    RETRY_BASE_DELAY: float = Field(0.05, ge=0.0)


settings = Settings()
