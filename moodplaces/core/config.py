from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    database_url: str = "sqlite:///./moodplaces.db"
    project_name: str = "MoodPlaces API"
    api_v1_prefix: str = "/api/v1"

    # Supabase authentication configuration
    # SUPABASE_URL: Full Supabase project URL (e.g., https://xxx.supabase.co)
    #   Used to derive JWKS URL and issuer for JWT verification
    supabase_url: str = "http://localhost:54321"

    # SUPABASE_JWT_AUDIENCE: JWT audience claim to validate (default: "authenticated")
    supabase_jwt_audience: str = "authenticated"

    debug: bool = Field(default=False, alias="DEBUG")

    # Gemini AI configuration (optional); used by POST /why-this-place
    gemini_api_key: str | None = None
    gemini_model: str = "gemini-2.5-flash"
    # Cooldown in seconds after 429 RESOURCE_EXHAUSTED; used when RetryInfo not present
    gemini_quota_cooldown_seconds: int = 60

    # OpenStreetMap upstreams for search and details
    overpass_endpoints: list[str] = [
        "https://overpass-api.de/api/interpreter",
        "https://overpass.kumi.systems/api/interpreter",
        "https://maps.mail.ru/osm/tools/overpass/api/interpreter",
    ]
    overpass_timeout_seconds: float = 15.0
    osm_api_base: str = "https://api.openstreetmap.org/api/0.6"
    upstream_user_agent: str = "MoodPlaces/1.0"

    # Fixed-window limit for POST /why-this-place, per client IP
    explanation_rate_limit_requests: int = 20
    explanation_rate_limit_window_seconds: int = 60

    # Client-side settings (PlaceDiscoveryClient)
    client_api_base_url: str = "http://localhost:8000/api/v1"
    client_request_timeout_seconds: float = 20.0
    # SQLAlchemy URL of the client's durable key/value storage
    client_storage_url: str = "sqlite:///./moodplaces_client.db"

    @property
    def supabase_jwks_url(self) -> str:
        """Derive JWKS URL from Supabase URL."""
        return f"{self.supabase_url.rstrip('/')}/auth/v1/.well-known/jwks.json"

    @property
    def supabase_issuer(self) -> str:
        """Derive issuer from Supabase URL."""
        return f"{self.supabase_url.rstrip('/')}/auth/v1"

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="forbid",
        populate_by_name=True,
    )


settings = Settings()
