"""
Configuration module - loads all env vars using pydantic-settings.
This is the SINGLE SOURCE OF TRUTH for all config values.
"""

from functools import lru_cache
from typing import List, Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    # PostgreSQL
    postgres_host: str = "localhost"
    postgres_port: int = 5432
    postgres_user: str = "studentpath"
    postgres_password: str = "password"
    postgres_db: str = "studentpath"

    # MongoDB
    mongodb_uri: str = "mongodb://localhost:27017"
    mongodb_db: str = "studentpath_docs"

    # LLM (OpenAI-compatible)
    openai_api_key: str = ""
    openai_base_url: str = "https://api.openai.com/v1"
    llm_model: str = "gpt-4o-mini"

    # JWT session
    jwt_secret_key: str = "change-this-secret"
    jwt_algorithm: str = "HS256"
    jwt_expire_minutes: int = 1440
    session_cookie_name: str = "auth_session"
    session_max_age: int = 86400
    cookie_secure: bool = False
    bcrypt_rounds: int = 12

    # SMTP
    smtp_host: str = "smtp.gmail.com"
    smtp_port: int = 587
    smtp_user: str = ""
    smtp_password: str = ""
    smtp_from_name: str = "StudentPath"

    # Object storage (S3-compatible)
    aws_access_key_id: str = ""
    aws_secret_access_key: str = ""
    aws_region: str = "ap-south-1"
    s3_bucket: str = "studentpath-uploads"
    s3_endpoint_url: Optional[str] = None
    s3_public_base_url: Optional[str] = None

    # Rate limits (requests per window)
    login_rate_limit: int = 5
    register_rate_limit: int = 3
    rate_limit_window_seconds: int = 60

    # App
    app_url: str = "http://localhost:3000"
    cron_secret: str = ""
    cors_origins: List[str] = ["*"]
    debug: bool = False
    log_level: str = "INFO"

    @property
    def postgres_url(self) -> str:
        """Construct PostgreSQL connection URL"""
        return (
            f"postgresql://{self.postgres_user}:{self.postgres_password}"
            f"@{self.postgres_host}:{self.postgres_port}/{self.postgres_db}"
        )

    # Pydantic v2 config
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8"
    )


@lru_cache()
def get_settings() -> Settings:
    return Settings()
