import os
from typing import Optional

from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict, Field, field_validator

load_dotenv()


def _int_list(raw: str) -> list[int]:
    return [int(item.strip()) for item in raw.split(",") if item.strip()]


class Settings(BaseModel):
    model_config = ConfigDict(frozen=True)

    database_url: str = Field(
        default=os.getenv("DATABASE_URL", "sqlite:///./survey_admin.db")
    )
    db_pool_size: int = Field(default=int(os.getenv("DB_POOL_SIZE", "15")))
    db_max_overflow: int = Field(default=int(os.getenv("DB_MAX_OVERFLOW", "20")))
    db_pool_timeout: int = Field(default=int(os.getenv("DB_POOL_TIMEOUT", "30")))
    db_pool_recycle: int = Field(default=int(os.getenv("DB_POOL_RECYCLE", "1800")))

    log_level: str = Field(default=os.getenv("LOG_LEVEL", "INFO"))

    # Record grids
    grid_page_size_options: list[int] = Field(
        default=_int_list(os.getenv("GRID_PAGE_SIZE_OPTIONS", "5,10,25,50")),
        validate_default=True,
    )
    grid_default_page_size: int = Field(
        default=int(os.getenv("GRID_DEFAULT_PAGE_SIZE", "10"))
    )
    grid_max_sessions: int = Field(default=int(os.getenv("GRID_MAX_SESSIONS", "256")))

    # Reminder email delivery
    smtp_host: str = Field(default=os.getenv("SMTP_HOST", "localhost"))
    smtp_port: int = Field(default=int(os.getenv("SMTP_PORT", "587")))
    smtp_username: Optional[str] = Field(default=os.getenv("SMTP_USERNAME"))
    smtp_password: Optional[str] = Field(default=os.getenv("SMTP_PASSWORD"))
    smtp_use_tls: bool = Field(
        default=os.getenv("SMTP_USE_TLS", "true").lower() in ("true", "1", "yes")
    )
    smtp_from_email: str = Field(
        default=os.getenv("SMTP_FROM_EMAIL", "noreply@example.com")
    )
    smtp_from_name: str = Field(default=os.getenv("SMTP_FROM_NAME", "Survey Admin"))
    smtp_timeout: int = Field(default=int(os.getenv("SMTP_TIMEOUT", "30")))
    reminder_subject: str = Field(
        default=os.getenv("REMINDER_SUBJECT", "Reminder: your survey is waiting")
    )
    survey_base_url: str = Field(
        default=os.getenv("SURVEY_BASE_URL", "http://localhost:3000/survey")
    )

    @field_validator("grid_page_size_options", mode="after")
    @classmethod
    def validate_page_size_options(cls, v: list[int]) -> list[int]:
        if not v or any(size <= 0 for size in v):
            raise ValueError("GRID_PAGE_SIZE_OPTIONS must list positive integers")
        return v


settings = Settings()
