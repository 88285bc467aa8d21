from pathlib import Path
from typing import Literal, Optional
from pydantic import Field, ValidationInfo, field_validator
from pydantic_settings import BaseSettings
from dotenv import load_dotenv

# Explicitly load .env file and override existing environment variables
# This ensures that values from .env take precedence over system-wide environment variables.
load_dotenv(override=True)

class Settings(BaseSettings):
    """Base settings for the registry service."""

    PROJECT_NAME: str = "Car Registry"
    PORT: int = 8080

    # Which Data Access Module variant backs people / cars / stores
    DATA_BACKEND: Literal["relational", "document", "flatfile"] = "relational"

    # Database settings
    # Default values for local development, override these in .env file
    POSTGRES_SERVER: str = "localhost"
    POSTGRES_USER: str = "postgres"
    POSTGRES_PASSWORD: str = "postgres"
    POSTGRES_DB: str = "car_registry"
    POSTGRES_PORT: int = 5432

    # A full connection string wins over the individual components
    DATABASE_URL: Optional[str] = None

    SQLALCHEMY_DATABASE_URI: Optional[str] = Field(None, validate_default=True)

    @field_validator("SQLALCHEMY_DATABASE_URI", mode="before")
    @classmethod
    def assemble_db_connection(cls, v: Optional[str], info: ValidationInfo) -> str:
        values = info.data
        if values.get("DATABASE_URL"):
            return values["DATABASE_URL"]

        if isinstance(v, str) and v:
            return v
        return (
            f"postgresql://{values.get('POSTGRES_USER')}:{values.get('POSTGRES_PASSWORD')}"
            f"@{values.get('POSTGRES_SERVER')}:{values.get('POSTGRES_PORT')}"
            f"/{values.get('POSTGRES_DB') or ''}"
        )

    # Document store
    MONGODB_URL: str = "mongodb://localhost:27017"
    MONGODB_DB: str = "car_registry"

    # The auth store keeps its own connection; it may point at another database
    AUTH_DATABASE_URL: Optional[str] = Field(None, validate_default=True)

    @field_validator("AUTH_DATABASE_URL", mode="before")
    @classmethod
    def default_auth_connection(cls, v: Optional[str], info: ValidationInfo) -> Optional[str]:
        if isinstance(v, str) and v:
            return v
        return info.data.get("SQLALCHEMY_DATABASE_URI")

    # Flat-file store and uploads
    DATA_DIR: str = "data"
    UPLOAD_DIR: str = "public/pictures/uploaded"
    TEMPLATES_DIR: str = str(Path(__file__).resolve().parent.parent / "templates")

    # Session cookie settings
    SESSION_SECRET_KEY: str = "change-me"  # Change this in production
    SESSION_ALGORITHM: str = "HS256"
    SESSION_COOKIE_NAME: str = "session"
    SESSION_DURATION_MINUTES: int = 2
    SESSION_ACTIVE_DURATION_MINUTES: int = 1
    # Only the most recent logins are copied into the cookie
    SESSION_HISTORY_LIMIT: int = 10

    # Password hashing
    BCRYPT_ROUNDS: int = 10

    model_config = {
        "case_sensitive": True,
        "env_file": ".env",
        "extra": "ignore",
    }

# Create settings instance
settings = Settings()
