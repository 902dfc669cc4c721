"""Application configuration loaded from environment variables."""

from __future__ import annotations

from enum import Enum
from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict

# Resolve .env relative to the project root
_PROJECT_ROOT = Path(__file__).resolve().parents[3]
_ENV_FILE = _PROJECT_ROOT / ".env"


class Tour(str, Enum):
    PGA = "pga"
    OPP = "opp"
    EURO = "euro"
    ALT = "alt"


def parse_tour(value: str) -> Tour:
    """Map a raw tour string onto the fixed tour set, rejecting anything else."""
    try:
        return Tour(value.strip().lower())
    except ValueError:
        allowed = ", ".join(t.value for t in Tour)
        raise ValueError(f"Invalid tour {value!r}. Must be one of: {allowed}") from None


def _split_csv(raw: str) -> list[str]:
    return [part.strip() for part in raw.split(",") if part.strip()]


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=str(_ENV_FILE),
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # --- Supabase ---
    supabase_url: str
    supabase_service_role_key: str
    supabase_schema: str = "public"

    # --- Storage buckets ---
    supabase_bucket_raw_api: str = "golfmx-raw-api"
    archive_raw_feeds: bool = False

    # --- DataGolf ---
    datagolf_api_key: str
    datagolf_base_url: str = "https://feeds.datagolf.com"
    request_timeout_s: float = 30.0

    # --- Odds ---
    primary_book: str = "fanduel"
    secondary_book: str = "datagolf"
    fallback_books: str = (
        "fanduel,draftkings,betmgm,caesars,bet365,"
        "pointsbet,unibet,betcris,betonline,bovada"
    )

    # --- Tournaments ---
    unsupported_event_keywords: str = "Zurich Classic,Ryder Cup,Presidents Cup,Solheim Cup"

    # --- App ---
    ingest_secret: str | None = None
    app_env: str = "development"
    log_level: str = "INFO"

    @property
    def book_priority(self) -> list[str]:
        return _split_csv(self.fallback_books)

    @property
    def unsupported_events(self) -> list[str]:
        return _split_csv(self.unsupported_event_keywords)


_settings: Settings | None = None


def get_settings() -> Settings:
    global _settings
    if _settings is None:
        _settings = Settings()  # type: ignore[call-arg]
    return _settings
