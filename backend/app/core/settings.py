# app/core/settings.py
from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field

class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        case_sensitive=False,
    )

    api_title: str = Field(default="Contact API", alias="API_TITLE")
    cors_origins: str = Field(default="http://localhost:3000", alias="CORS_ORIGINS")
    log_level: str = Field(default="info", alias="LOG_LEVEL")

    # Simulated downstream work (persistence/notification) per accepted submission
    contact_processing_delay_seconds: float = Field(
        default=1.0, ge=0.0, alias="CONTACT_PROCESSING_DELAY_SECONDS"
    )

    # Probability of a synthetic 500 on an otherwise valid submission; 0 disables it
    contact_fault_rate: float = Field(default=0.0, ge=0.0, le=1.0, alias="CONTACT_FAULT_RATE")

    # Client side: where the form posts to, and how long success/error feedback stays up
    contact_api_url: str = Field(default="http://localhost:8000", alias="CONTACT_API_URL")
    contact_reset_delay_seconds: float = Field(default=5.0, ge=0.0, alias="CONTACT_RESET_DELAY_SECONDS")

settings = Settings()
