"""Configuration for the Luma MCP server."""

import os
from pathlib import Path

from dotenv import load_dotenv

load_dotenv()

# Installation root (the directory holding src/)
PROJECT_ROOT = Path(__file__).resolve().parent.parent.parent


class Config:
    """Simple configuration class with environment variable support."""

    def __init__(self):
        # Single-calendar bootstrap mode
        self.api_key: str | None = os.getenv("LUMA_API_KEY") or None
        self.bootstrap_profile_name: str = os.getenv("LUMA_PROFILE_NAME", "default")

        # Local files
        self.calendars_file: Path = Path(os.getenv("LUMA_CALENDARS_FILE", str(PROJECT_ROOT / "calendars.json")))
        self.export_dir: Path = Path(os.getenv("LUMA_EXPORT_DIR", str(PROJECT_ROOT / "exports")))

        # Remote API
        self.api_base_url: str = os.getenv("LUMA_API_BASE_URL", "https://api.lu.ma/public/v1")
        self.public_api_base_url: str = os.getenv("LUMA_PUBLIC_API_BASE_URL", "https://public-api.lu.ma/public/v1")
        self.request_timeout: float = float(os.getenv("LUMA_REQUEST_TIMEOUT", "30"))
        self.max_pages: int = int(os.getenv("LUMA_MAX_PAGES", "500"))

        # Logging
        self.debug: bool = os.getenv("DEBUG", "false").lower() == "true"
        self.log_file: str | None = os.getenv("LOG_FILE") or None


# Global config instance
config = Config()
