# poolsite/core/config.py

from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import Literal

class Settings(BaseSettings):
    # App
    ENV: str = "development"
    DEBUG: bool = False

    # Security
    SECRET_KEY: str
    ALGORITHM: Literal["HS256", "HS512"] = "HS256"
    SESSION_MAX_AGE_HOURS: int = 24

    # Database
    DATABASE_URL: str = "sqlite:///./poolsite.db"
    AUTO_CREATE_TABLES: bool = True

    # Admin bootstrap credentials
    ADMIN_USERNAME: str | None = None
    ADMIN_PASSWORD: str | None = None

    # Email (Resend)
    RESEND_API_KEY: str | None = None
    RESEND_FROM_EMAIL: str | None = None
    CONTACT_EMAIL: str | None = None

    # Sales
    DEFAULT_TAX_RATE: float = 0.0625

    # Media
    MAX_UPLOAD_BYTES: int = 10 * 1024 * 1024
    IMAGE_QUERY_TIMEOUT_SECONDS: float = 8.0

    RATE_LIMIT_ENABLED: bool = True


    model_config = SettingsConfigDict(
        env_file=".env",
        extra="forbid",  
    )

    @property
    def is_production(self) -> bool:
        return self.ENV == "production"


settings = Settings()
