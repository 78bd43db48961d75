from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import Optional, List


class Settings(BaseSettings):
    # Supabase
    supabase_url: str = ""
    supabase_key: str = ""
    supabase_service_role_key: Optional[str] = None  # Required to credit another user's profile under RLS

    # Object storage
    storage_backend: str = "supabase"  # supabase | s3
    proof_bucket: str = "task-proofs"
    avatar_bucket: str = "profile-pictures"

    # AWS S3 (only when storage_backend == "s3")
    aws_access_key_id: Optional[str] = None
    aws_secret_access_key: Optional[str] = None
    aws_region: str = "us-east-1"
    s3_bucket_name: Optional[str] = None

    # Random activity provider used when the Tasks catalog is empty
    activity_api_url: str = "https://www.boredapi.com/api/activity/"
    activity_api_timeout: float = 5.0

    # Auth / session
    oauth_redirect_url: Optional[str] = None
    session_cache_ttl_seconds: int = 300

    # Game rules
    leaderboard_default_limit: int = 10
    feed_page_limit: int = 50
    score_update_attempts: int = 3

    # App
    app_name: str = "task-app-backend"
    debug: bool = False
    environment: str = "development"  # development | staging | production
    log_level: str = "INFO"
    cors_origins: str = "http://localhost:3000,http://127.0.0.1:3000"
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
