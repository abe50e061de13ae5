from pydantic_settings import BaseSettings, SettingsConfigDict
from functools import lru_cache
import os

class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    # API Keys
    openai_api_key: str = ""
    elevenlabs_api_key: str = ""

    # Supabase (identity provider)
    supabase_url: str = ""
    supabase_anon_key: str = ""

    # App Settings
    app_name: str = "CareerCompass"
    app_version: str = "1.0.0"
    app_env: str = "production"  # "development" skips X-Forwarded-Host handling on redirects
    debug: bool = False
    allowed_origins: str = "http://localhost:3000"

    # API Settings
    backend_host: str = "0.0.0.0"  # Changed to 0.0.0.0 for Railway
    backend_port: int = int(os.getenv("PORT", "8000"))  # Railway provides PORT env var

    # Career analysis generation
    analysis_model: str = "gpt-4o-mini"
    analysis_temperature: float = 0.7
    analysis_max_tokens: int = 2000
    upstream_timeout_seconds: float = 30.0
    strict_schema_validation: bool = True
    job_market_region: str = "Malaysia"
    currency_label: str = "Malaysian Ringgit (RM)"

    # Text-to-speech
    elevenlabs_base_url: str = "https://api.elevenlabs.io"

    @property
    def is_local_env(self) -> bool:
        return self.app_env.lower() == "development"

    def missing_secrets(self) -> list[str]:
        """Names of unset credentials, for the startup warning only."""
        required = {
            "OPENAI_API_KEY": self.openai_api_key,
            "ELEVENLABS_API_KEY": self.elevenlabs_api_key,
            "SUPABASE_URL": self.supabase_url,
            "SUPABASE_ANON_KEY": self.supabase_anon_key,
        }
        return [name for name, value in required.items() if not value]

@lru_cache()
def get_settings() -> Settings:
    return Settings()
