from functools import lru_cache
import json
from pathlib import Path
from typing import Annotated, Any

from pydantic import field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict


BACKEND_ENV_FILE = Path(__file__).resolve().parents[2] / ".env"


class Settings(BaseSettings):
    # Resolve to backend/.env so `uvicorn --app-dir backend` works from any cwd.
    model_config = SettingsConfigDict(env_file=str(BACKEND_ENV_FILE), env_file_encoding="utf-8", extra="ignore")

    project_name: str = "Schedule Board API"
    api_prefix: str = "/api"

    max_request_size_bytes: int = 5_000_000

    conflicts_hide_stacked_courses: bool = True
    conflicts_hide_lab_corequisites: bool = True

    optimizer_max_permutations: int = 50
    optimizer_max_time_ms: int = 30_000
    optimizer_max_workers: int = 2
    optimizer_job_retention: int = 100

    cors_origins: Annotated[list[str], NoDecode] = [
        "http://localhost:3000",
        "http://127.0.0.1:3000",
        "http://localhost:5173",
        "http://127.0.0.1:5173",
    ]

    @field_validator("cors_origins", mode="before")
    @classmethod
    def parse_cors_origins(cls, value: Any) -> Any:
        # JSON list or comma separated; malformed JSON is a settings error
        if not isinstance(value, str):
            return value
        text = value.strip()
        if text.startswith("["):
            return json.loads(text)
        return [origin.strip() for origin in text.split(",") if origin.strip()]


@lru_cache
def get_settings() -> Settings:
    return Settings()
