from functools import lru_cache
import json
from pathlib import Path

from pydantic import field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from schedcore.core.exceptions import SchedulerError
from schedcore.services.timegrid import OperatingWindow


BACKEND_ENV_FILE = Path(__file__).resolve().parents[2] / ".env"


class Settings(BaseSettings):
    # Resolve to backend/.env so `uvicorn --app-dir backend` works from any cwd.
    model_config = SettingsConfigDict(env_file=str(BACKEND_ENV_FILE), env_file_encoding="utf-8")

    project_name: str = "schedcore API"
    api_prefix: str = "/api"
    log_level: str = "INFO"

    database_url: str = "sqlite:///./schedcore.db"

    day_start: str = "7:30"
    day_end: str = "19:30"
    time_grid_minutes: int = 15
    search_step_minutes: int = 30
    find_slot_step_minutes: int = 15
    bulk_attempts_per_session: int = 500
    auto_schedule_timeout_seconds: float | None = 10.0

    max_request_size_bytes: int = 2_500_000

    cors_origins: list[str] = [
        "http://localhost:3000",
        "http://127.0.0.1:3000",
        "http://localhost:5173",
        "http://127.0.0.1:5173",
    ]

    @field_validator("cors_origins", mode="before")
    @classmethod
    def split_cors_origins(cls, value: str | list[str]) -> list[str]:
        if isinstance(value, str):
            stripped = value.strip()
            if stripped.startswith("["):
                try:
                    parsed = json.loads(stripped)
                    if isinstance(parsed, list):
                        return [str(item).strip() for item in parsed if str(item).strip()]
                except json.JSONDecodeError:
                    pass
            return [item.strip() for item in value.split(",") if item.strip()]
        return value

    @field_validator("log_level")
    @classmethod
    def normalize_log_level(cls, value: str) -> str:
        return value.strip().upper() or "INFO"

    @model_validator(mode="after")
    def validate_window(self) -> "Settings":
        try:
            OperatingWindow.from_strings(self.day_start, self.day_end, grid_minutes=self.time_grid_minutes)
        except SchedulerError as exc:
            raise ValueError(exc.message) from exc
        if self.search_step_minutes <= 0 or self.find_slot_step_minutes <= 0:
            raise ValueError("Step minutes must be positive")
        if self.bulk_attempts_per_session < 1:
            raise ValueError("Attempt budget must be at least 1")
        return self

    def operating_window(self) -> OperatingWindow:
        return OperatingWindow.from_strings(self.day_start, self.day_end, grid_minutes=self.time_grid_minutes)


@lru_cache
def get_settings() -> Settings:
    return Settings()
