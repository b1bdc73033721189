"""
Startup configuration for the e-pass backend.

Values come from the environment (optionally seeded from `.env.local` / `.env`
by `main.py`) and are read once into an immutable `Settings` instance. The
database connection string, credentials included, is only ever supplied
through `MONGODB_URI`.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Tuple

DEFAULT_ALLOWED_ORIGINS = (
    "https://aryakrishna715.github.io",
    "https://visitor-backend-23.onrender.com",
)


@dataclass(frozen=True)
class Settings:
    port: int = 3001
    host: str = "0.0.0.0"
    allowed_origins: Tuple[str, ...] = DEFAULT_ALLOWED_ORIGINS
    mongodb_uri: str = "mongodb://localhost:27017"
    mongodb_database: str = "visitor_epass"
    mongodb_collection: str = "visitors"
    public_dir: Path = Path(__file__).resolve().parent.parent / "public"
    timezone: str = "Asia/Kolkata"
    pass_title: str = "Brindavan Group of Institutions"
    map_heading: str = "BGI Map"
    public_base_url: Optional[str] = None
    log_level: str = "INFO"

    @property
    def pdf_dir(self) -> Path:
        return self.public_dir / "pdfs"


def _split_csv(raw: str) -> Tuple[str, ...]:
    return tuple(part.strip() for part in raw.split(",") if part.strip())


def load_settings() -> Settings:
    """Build `Settings` from environment variables, falling back to defaults."""
    defaults = Settings()
    origins = os.getenv("ALLOWED_ORIGINS")
    base_url = (os.getenv("PUBLIC_BASE_URL") or "").strip().rstrip("/")
    return Settings(
        port=int(os.getenv("PORT", str(defaults.port))),
        host=os.getenv("HOST", defaults.host),
        allowed_origins=_split_csv(origins) if origins else defaults.allowed_origins,
        mongodb_uri=os.getenv("MONGODB_URI", defaults.mongodb_uri),
        mongodb_database=os.getenv("MONGODB_DATABASE", defaults.mongodb_database),
        mongodb_collection=os.getenv("MONGODB_COLLECTION", defaults.mongodb_collection),
        public_dir=Path(os.getenv("PUBLIC_DIR") or defaults.public_dir),
        timezone=os.getenv("PASS_TIMEZONE", defaults.timezone),
        pass_title=os.getenv("PASS_TITLE", defaults.pass_title),
        map_heading=os.getenv("PASS_MAP_HEADING", defaults.map_heading),
        public_base_url=base_url or None,
        log_level=os.getenv("LOG_LEVEL", defaults.log_level).upper(),
    )
