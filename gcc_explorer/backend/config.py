"""
Runtime settings read from the environment (and a local .env file).
"""
import os
from dataclasses import dataclass, field
from pathlib import Path

from dotenv import load_dotenv


# Project root is two levels up from backend/
BACKEND_DIR = Path(__file__).resolve().parent
PROJECT_ROOT = BACKEND_DIR.parent.parent

DEFAULT_CORS_ORIGINS = [
    "http://localhost:3000",
    "http://localhost:5173",
    "http://127.0.0.1:3000",
    "http://127.0.0.1:5173",
]


@dataclass
class Settings:
    data_dir: Path
    saved_filters_path: Path
    log_level: str = "INFO"
    cors_origins: list[str] = field(default_factory=lambda: list(DEFAULT_CORS_ORIGINS))
    port: int = 8000


def _split_origins(raw: str | None) -> list[str]:
    if not raw:
        return list(DEFAULT_CORS_ORIGINS)
    return [origin.strip() for origin in raw.split(",") if origin.strip()]


def get_settings() -> Settings:
    """Build settings from environment variables, loading .env first."""
    load_dotenv()

    return Settings(
        data_dir=Path(os.getenv("GCC_DATA_DIR", PROJECT_ROOT / "data")),
        saved_filters_path=Path(os.getenv("SAVED_FILTERS_PATH", PROJECT_ROOT / "saved_filters.json")),
        log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
        cors_origins=_split_origins(os.getenv("CORS_ORIGINS")),
        port=int(os.getenv("PORT", "8000")),
    )
