from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    # Database
    database_url: str

    # Redis
    redis_url: str

    # API
    app_version: str = "0.1.0"
    cors_origins: str = ""  # comma-separated, ignored in development
    log_level: str = "INFO"

    # Security
    secret_key: str  # HMAC secret for signed client requests

    # Admin
    admin_user: str = "admin"
    admin_pass: str = "changeme"

    # Reports
    report_rate_limit_seconds: int = 60
    urgency_sweep_interval_seconds: int = 300

    # Bookings
    booking_min_hours: float = 1
    booking_max_hours: float = 24
    booking_max_advance_days: int = 90
    booking_rate_limit_count: int = 3  # booking requests per guest per window
    booking_rate_limit_window_seconds: int = 900

    # Environment
    environment: str = "development"

    @property
    def is_development(self) -> bool:
        return self.environment == "development"

    @property
    def cors_origin_list(self) -> list[str]:
        return [origin.strip() for origin in self.cors_origins.split(",") if origin.strip()]


settings = Settings()
