"""Dashboard API configuration loaded from environment variables."""
import os
from functools import lru_cache
from pydantic_settings import BaseSettings

# Repository root, where the SQLite files live unless DATA_PATH says otherwise
DEFAULT_DATA_PATH = os.path.dirname(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))


class Settings(BaseSettings):
    """Mood dashboard settings: storage location, server and CORS."""

    data_path: str = os.getenv("DATA_PATH", DEFAULT_DATA_PATH)
    mood_db_name: str = "moods.db"
    context_db_name: str = "day_context.db"

    # Regenerate insights in the background after each write
    background_refresh: bool = True

    api_host: str = "127.0.0.1"
    api_port: int = 8082
    log_level: str = "INFO"

    cors_origins: list[str] = ["http://localhost:3000", "http://127.0.0.1:3000"]

    class Config:
        env_prefix = "DASHBOARD_"

    @property
    def mood_db_path(self) -> str:
        return os.path.join(self.data_path, self.mood_db_name)

    @property
    def context_db_path(self) -> str:
        return os.path.join(self.data_path, self.context_db_name)


@lru_cache
def get_settings() -> Settings:
    return Settings()
