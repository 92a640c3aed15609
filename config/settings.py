"""
Configuration management using Pydantic Settings.

Environment variables:
- OPENAI_API_KEY: API key for the multimodal model endpoint
- OPENAI_BASE_URL: Base URL for an OpenAI-compatible server (optional)
- OCR_MODEL: Chat model used for expression extraction
- ENHANCE_MODEL: Image model used for enhancement
- MAX_UPLOAD_BYTES: Largest accepted upload before rejection
- MAX_CROP_PIXELS: Largest crop output, in pixels
- EXPRESSION_POLICY: 'permissive' (strip and trim) or 'strict' (reject)
- MAX_SESSIONS, SESSION_TTL_SECONDS: In-memory session limits
"""
from typing import Literal, Optional
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Model endpoint
    openai_api_key: str = Field(default="", validation_alias="OPENAI_API_KEY")
    openai_base_url: Optional[str] = Field(default=None, validation_alias="OPENAI_BASE_URL")

    # OCR Parameters
    ocr_model: str = Field(default="gpt-4o-mini", validation_alias="OCR_MODEL")
    ocr_max_tokens: int = Field(default=1024, validation_alias="OCR_MAX_TOKENS")
    ocr_temperature: float = Field(default=0.0, validation_alias="OCR_TEMPERATURE")

    # Enhancement
    enhance_enabled: bool = Field(default=True, validation_alias="ENHANCE_ENABLED")
    enhance_model: str = Field(default="gpt-image-1", validation_alias="ENHANCE_MODEL")

    # Image input
    max_upload_bytes: int = Field(default=10 * 1024 * 1024, validation_alias="MAX_UPLOAD_BYTES")
    max_image_size: int = Field(default=2048, validation_alias="MAX_IMAGE_SIZE")
    crop_output_format: str = Field(default="JPEG", validation_alias="CROP_OUTPUT_FORMAT")
    max_crop_pixels: int = Field(default=2048 * 2048, validation_alias="MAX_CROP_PIXELS")

    # Evaluation
    expression_policy: Literal["permissive", "strict"] = Field(
        default="permissive", validation_alias="EXPRESSION_POLICY"
    )

    # API Configuration
    api_host: str = Field(default="0.0.0.0", validation_alias="API_HOST")
    api_port: int = Field(default=8002, validation_alias="API_PORT")
    log_level: str = Field(default="INFO", validation_alias="LOG_LEVEL")

    # Sessions
    max_sessions: int = Field(default=1000, validation_alias="MAX_SESSIONS")
    session_ttl_seconds: float = Field(default=3600.0, validation_alias="SESSION_TTL_SECONDS")

    def get_ocr_params(self) -> dict:
        """Get OCR request parameters as dictionary."""
        return {
            'max_tokens': self.ocr_max_tokens,
            'temperature': self.ocr_temperature,
        }


# Global settings instance
settings = Settings()
