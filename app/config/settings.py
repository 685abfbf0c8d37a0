from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import Optional, List


class Settings(BaseSettings):
    # Supabase
    supabase_url: str = ""
    supabase_key: str = ""
    supabase_service_role_key: Optional[str] = None  # Required for admin reads across all rows

    # Gemini (image OCR, YouTube fallback summaries)
    gemini_api_key: Optional[str] = None
    gemini_model: str = "gemini-2.0-flash"

    # Storage buckets
    thumbnails_bucket: str = "thumbnails"
    extracted_files_bucket: str = "extracted-files"
    max_image_upload_mb: int = 5
    max_extraction_file_mb: int = 50

    # Outbound HTTP (web pages, YouTube)
    http_timeout_seconds: int = 30

    # App
    app_name: str = "qzvert-backend"
    debug: bool = False
    environment: str = "development"  # development | staging | production
    log_level: str = "INFO"
    cors_origins: str = "http://localhost:3000,http://localhost:5173,http://127.0.0.1:3000,http://127.0.0.1:5173"
    rate_limit: str = "100/minute"  # slowapi format, e.g. "100/minute"

    @property
    def is_production(self) -> bool:
        return self.environment == "production"

    def get_cors_origins_list(self) -> List[str]:
        return [o.strip() for o in self.cors_origins.split(",") if o.strip()]

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=False,
        env_prefix="",
        extra="ignore"
    )


settings = Settings()
