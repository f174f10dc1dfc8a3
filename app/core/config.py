"""Application configuration management"""

from functools import lru_cache
import json
from typing import Annotated, Optional, List
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings with environment variable support"""

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=True, extra="ignore")

    # Application
    APP_NAME: str = "Merchant Statement Analysis API"
    APP_VERSION: str = "1.0.0"
    DEBUG: bool = False
    API_V1_STR: str = "/api/v1"
    LOG_LEVEL: str = "INFO"

    # Server
    HOST: str = "0.0.0.0"
    PORT: int = 8000

    # Database
    DATABASE_URL: str = "sqlite:///./data/merchant_statements.db"

    # Security
    SECRET_KEY: str = Field(...)
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60 * 24 * 7

    # Hosts / CORS
    ALLOWED_HOSTS: Annotated[List[str], NoDecode] = Field(default=["*"])
    BACKEND_CORS_ORIGINS: Annotated[List[str], NoDecode] = Field(
        default=["http://localhost:3000", "http://localhost:5173"]
    )

    # Cloudinary (statement file storage)
    CLOUDINARY_CLOUD_NAME: str = Field(...)
    CLOUDINARY_API_KEY: str = Field(...)
    CLOUDINARY_API_SECRET: str = Field(...)
    CLOUDINARY_FOLDER: str = "merchant-statements"

    # Google Gemini
    GEMINI_API_KEY: str = Field(...)
    GEMINI_MODEL: str = "gemini-2.0-flash"
    GEMINI_MAX_OUTPUT_TOKENS: int = 8000

    # File Processing
    MAX_FILE_SIZE: int = 20 * 1024 * 1024  # 20MB
    MAX_FILES_PER_UPLOAD: int = 10
    ALLOWED_FILE_TYPES: Annotated[List[str], NoDecode] = Field(
        default=[
            "application/pdf",
            "image/jpeg",
            "image/png",
            "image/gif",
            "image/webp",
        ]
    )

    # Monitoring
    SENTRY_DSN: Optional[str] = None

    @field_validator("ALLOWED_HOSTS", "BACKEND_CORS_ORIGINS", "ALLOWED_FILE_TYPES", mode="before")
    @classmethod
    def split_comma_separated(cls, v):
        if isinstance(v, str) and not v.startswith("["):
            return [i.strip() for i in v.split(",") if i.strip()]
        elif isinstance(v, str):
            return json.loads(v)
        elif isinstance(v, list):
            return v
        raise ValueError(v)


@lru_cache()
def get_settings() -> Settings:
    """Get cached application settings"""
    return Settings()


settings = get_settings()
