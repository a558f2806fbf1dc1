# backend/agenda/config.py

from pathlib import Path
from pydantic_settings import BaseSettings, SettingsConfigDict

BASE_DIR = Path(__file__).resolve().parents[2]  # repo root


class Settings(BaseSettings):
    database_url: str = "sqlite:///./agenda.db"
    redis_url: str | None = None

    # PostgREST / Supabase ledger (used instead of SQL when both are set)
    supabase_url: str | None = None
    supabase_key: str | None = None

    default_timezone: str = "America/Sao_Paulo"
    horizon_days: int = 14
    ledger_timeout_seconds: float = 10.0
    profile_cache_ttl_seconds: int = 300
    label_locale: str = "pt-BR"

    log_level: str = "INFO"

    model_config = SettingsConfigDict(
        env_file=BASE_DIR / ".env",
        extra="ignore",
    )

    @property
    def resolved_database_url(self) -> str:
        url = self.database_url
        if url.startswith("sqlite:///./"):
            # Relative sqlite path is resolved against the repo root
            relative_path = url.replace("sqlite:///./", "")
            absolute_path = BASE_DIR / relative_path
            return f"sqlite:///{absolute_path}"
        return url


settings = Settings()
