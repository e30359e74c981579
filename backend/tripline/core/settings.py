from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application level configuration sourced from env or .env file."""

    app_env: str = "development"
    app_name: str = "Tripline Timeline Engine"
    app_version: str = "0.1.0"
    debug: bool = True
    uvicorn_host: str = "0.0.0.0"
    uvicorn_port: int = 8000

    database_url: str = "sqlite:///./tripline.db"

    # --- Drag & drop interaction ---
    drag_frame_interval_ms: int = Field(
        default=16, validation_alias="DRAG_FRAME_INTERVAL_MS"
    )
    drag_watchdog_seconds: float = Field(
        default=20.0, validation_alias="DRAG_WATCHDOG_SECONDS"
    )

    # --- Travel statistics ---
    fallback_cost_per_km: float = Field(
        default=0.30, validation_alias="FALLBACK_COST_PER_KM"
    )
    default_fuel_consumption: float = Field(
        default=9.0, validation_alias="DEFAULT_FUEL_CONSUMPTION"
    )
    default_fuel_price: float = Field(
        default=1.65, validation_alias="DEFAULT_FUEL_PRICE"
    )
    missing_coordinates_travel_minutes: int = Field(
        default=30, validation_alias="MISSING_COORDINATES_TRAVEL_MINUTES"
    )

    log_level: str = "INFO"
    log_directory: str = "logs"
    log_max_bytes: int = 2 * 1024 * 1024
    log_backup_count: int = 5

    model_config = SettingsConfigDict(
        env_file=(".env", "../.env"),
        env_file_encoding="utf-8",
        extra="ignore",
    )


@lru_cache
def get_settings() -> Settings:
    return Settings()


settings = get_settings()
