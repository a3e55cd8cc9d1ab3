import os

from pydantic_settings import BaseSettings, SettingsConfigDict

# --- DYNAMIC PATH CONFIGURATION ---
# Listing_Engine/config/__init__.py -> parent is config -> parent is Listing_Engine -> parent is project root
BASE_DIR = os.path.dirname(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

ENV_FILE = os.path.join(BASE_DIR, ".env")


class Settings(BaseSettings):
    """Engine tunables, overridable through LISTING_ENGINE_* environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="LISTING_ENGINE_",
        env_file=ENV_FILE,
        extra="ignore",
        case_sensitive=True,
    )

    # Logging (only the CLI runner configures handlers)
    LOG_LEVEL: str = "INFO"

    # Report parsing
    REPORT_HEADER_SENTINEL: str = "Listing title"
    REPORT_MIN_COLUMNS: int = 5

    # Dataset aggregates
    TRENDING_LIMIT: int = 10

    # Keyword analysis
    KEYWORD_TREND_BAND_PCT: float = 20.0
    KEYWORD_SUGGESTION_LIMIT: int = 5

    # Cross-report history
    TOP_TIMELINE_LIMIT: int = 5


settings = Settings()
