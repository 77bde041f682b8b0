"""
Application configuration read from environment variables (and `.env`).

All tunables of the student-records pipeline live here so that the
service layer receives them explicitly instead of relying on hard-coded
identities (e.g. which staff account may change a student's status).
"""

from functools import lru_cache
from typing import Annotated, FrozenSet, Optional

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict


class Settings(BaseSettings):
    """Runtime settings for the student-records backend."""

    student_role_name: str = Field(default="student", alias="STUDENT_ROLE_NAME")
    # Comma-separated in the environment: STATUS_REVIEWER_IDS=1,7
    status_reviewer_ids: Annotated[FrozenSet[int], NoDecode] = Field(
        default=frozenset({1}), alias="STATUS_REVIEWER_IDS"
    )
    default_reporter_id: int = Field(default=1, alias="DEFAULT_REPORTER_ID")
    list_empty_as_not_found: bool = Field(default=True, alias="LIST_EMPTY_AS_NOT_FOUND")

    jwt_access_token_secret: str = Field(
        default="dev-access-secret", alias="JWT_ACCESS_TOKEN_SECRET"
    )
    jwt_algorithm: str = Field(default="HS256", alias="JWT_ALGORITHM")
    jwt_verification_secret: str = Field(
        default="dev-verification-secret", alias="JWT_VERIFICATION_SECRET"
    )
    verification_token_minutes: int = Field(default=1440, alias="VERIFICATION_TOKEN_MINUTES")
    app_base_url: str = Field(default="http://localhost:5173", alias="APP_BASE_URL")

    smtp_host: Optional[str] = Field(default=None, alias="SMTP_HOST")
    smtp_port: int = Field(default=587, alias="SMTP_PORT")
    smtp_username: Optional[str] = Field(default=None, alias="SMTP_USERNAME")
    smtp_password: Optional[str] = Field(default=None, alias="SMTP_PASSWORD")
    smtp_use_tls: bool = Field(default=True, alias="SMTP_USE_TLS")
    mail_from: Optional[str] = Field(default=None, alias="MAIL_FROM")

    model_config = SettingsConfigDict(
        case_sensitive=False,
        env_file=".env",
        env_file_encoding="utf-8",
        env_ignore_empty=True,
        populate_by_name=True,
        extra="ignore",
    )

    @field_validator("status_reviewer_ids", mode="before")
    @classmethod
    def _split_ids(cls, value):
        if isinstance(value, str):
            return frozenset(int(part) for part in value.split(",") if part.strip())
        if isinstance(value, int):
            return frozenset({value})
        return value

    @model_validator(mode="after")
    def _default_sender(self):
        if not self.mail_from:
            self.mail_from = self.smtp_username
        return self


@lru_cache()
def get_settings() -> Settings:
    """Return the cached settings instance (FastAPI dependency)."""
    return Settings()
