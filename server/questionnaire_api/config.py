"""Application configuration loaded from environment variables."""
import os
from functools import lru_cache
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings loaded from environment."""

    # Storage
    data_path: str = os.path.dirname(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))
    db_filename: str = "questionnaire.db"

    @property
    def db_path(self) -> str:
        return os.path.join(self.data_path, self.db_filename)

    # API configuration
    api_host: str = "127.0.0.1"
    api_port: int = 8083

    # Listing
    default_limit: int = 100
    max_limit: int = 1000

    # CORS
    cors_origins: list[str] = ["http://localhost:3000", "http://127.0.0.1:3000"]

    class Config:
        env_prefix = "QUESTIONNAIRE_"


@lru_cache
def get_settings() -> Settings:
    return Settings()
