"""Settings loader with .env support."""

from functools import lru_cache
from typing import List, Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


DEFAULT_SIGNATURE_HEADERS = "x-teamtailor-signature,teamtailor-signature,tt-signature,signature"


class Settings(BaseSettings):
    """Service configuration."""

    app_env: str = Field(default="development", validation_alias="APP_ENV")
    log_level: str = Field(default="INFO", validation_alias="LOG_LEVEL")
    log_file_path: Optional[str] = Field(default=None, validation_alias="LOG_FILE_PATH")

    # --- inbound webhook ---
    teamtailor_webhook_secret: Optional[str] = Field(default=None, validation_alias="TEAMTAILOR_WEBHOOK_SECRET")
    webhook_signature_headers: str = Field(
        default=DEFAULT_SIGNATURE_HEADERS, validation_alias="WEBHOOK_SIGNATURE_HEADERS"
    )
    webhook_max_age_seconds: int = Field(default=0, validation_alias="WEBHOOK_MAX_AGE_SECONDS")

    # --- publish state ---
    publish_store_url: Optional[str] = Field(default=None, validation_alias="PUBLISH_STORE_URL")

    # --- channels ---
    linkedin_access_token: Optional[str] = Field(default=None, validation_alias="LINKEDIN_ACCESS_TOKEN")
    linkedin_organization_id: Optional[str] = Field(default=None, validation_alias="LINKEDIN_ORGANIZATION_ID")
    linkedin_api_base: str = Field(default="https://api.linkedin.com/v2", validation_alias="LINKEDIN_API_BASE")

    facebook_access_token: Optional[str] = Field(default=None, validation_alias="FACEBOOK_ACCESS_TOKEN")
    facebook_page_id: Optional[str] = Field(default=None, validation_alias="FACEBOOK_PAGE_ID")
    facebook_api_base: str = Field(default="https://graph.facebook.com/v18.0", validation_alias="FACEBOOK_API_BASE")

    google_chat_webhook_url: Optional[str] = Field(default=None, validation_alias="GOOGLE_CHAT_WEBHOOK_URL")

    channel_timeout: float = Field(default=30.0, validation_alias="CHANNEL_TIMEOUT")

    # --- text generation ---
    openai_api_key: Optional[str] = Field(default=None, validation_alias="OPENAI_API_KEY")
    openai_base_url: str = Field(default="https://api.openai.com/v1", validation_alias="OPENAI_BASE_URL")
    openai_model: str = Field(default="gpt-4o-mini", validation_alias="OPENAI_MODEL")
    text_generation_timeout: float = Field(default=15.0, validation_alias="TEXT_GENERATION_TIMEOUT")
    announcement_language: str = Field(default="English", validation_alias="ANNOUNCEMENT_LANGUAGE")

    # --- branding / links ---
    brand_name: str = Field(default="Wippii Work", validation_alias="BRAND_NAME")
    careers_base_url: str = Field(default="https://wippiiwork.com", validation_alias="CAREERS_BASE_URL")
    default_company_slug: str = Field(default="wippii-work", validation_alias="DEFAULT_COMPANY_SLUG")

    model_config = SettingsConfigDict(
        case_sensitive=False,
        env_file=".env",
        env_file_encoding="utf-8",
        extra="allow",
    )

    @property
    def signature_header_names(self) -> List[str]:
        """Accepted signature headers in priority order, lower-cased."""

        return [item.strip().lower() for item in self.webhook_signature_headers.split(",") if item.strip()]

    @property
    def is_development(self) -> bool:
        return self.app_env.lower() == "development"


@lru_cache
def get_settings() -> Settings:
    """Return cached settings instance."""

    return Settings()
