"""
Settings for the Hobit backend, read from the environment (or a .env file).
"""
from functools import lru_cache
from pathlib import Path
from typing import List

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_CHALLENGES_PATH = Path(__file__).resolve().parent / "data" / "challenges.json"


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", extra="ignore"
    )

    mongo_url: str = Field(default="mongodb://localhost/hobit-backend")
    port: int = Field(default=8080)

    # Development toggle, skips MongoDB entirely
    use_in_memory_store: bool = Field(default=False)

    # Rebuild the program collection from the dataset at startup
    add_programs: bool = Field(default=False)

    challenges_path: Path = Field(default=DEFAULT_CHALLENGES_PATH)
    cors_origins: List[str] = Field(default=["*"])
    log_level: str = Field(default="INFO")


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()
