from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import Optional, List


class Settings(BaseSettings):
    # Supabase
    supabase_url: str = ""
    supabase_key: str = ""  # public anon key; row-level policies apply
    supabase_service_role_key: Optional[str] = None  # Only used by app/scripts seeding

    # Auth / session
    site_url: Optional[str] = None  # Absolute origin for OAuth redirects, falls back to request base URL
    oauth_provider: str = "google"
    session_cookie_max_age: int = 60 * 60 * 24 * 30

    # Domain
    feed_limit: int = 50
    invite_code_attempts: int = 3

    # App
    app_name: str = "teamfeed"
    debug: bool = False
    environment: str = "development"  # development | staging | production
    log_level: str = "INFO"
    cors_origins: str = "http://localhost:8000,http://127.0.0.1:8000"
    rate_limit: str = "100/minute"  # slowapi format, e.g. "100/minute"
    auth_rate_limit: str = "20/minute"
    rate_limit_enabled: bool = True

    @property
    def is_production(self) -> bool:
        return self.environment == "production"

    @property
    def cookie_secure(self) -> bool:
        return self.is_production

    def get_cors_origins_list(self) -> List[str]:
        return [o.strip() for o in self.cors_origins.split(",") if o.strip()]

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=False,
        env_prefix="",  # No prefix needed
        extra="ignore"
    )


settings = Settings()
