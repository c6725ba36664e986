"""Centralised settings for tidyscrape.

Values can be overridden via environment variables or a `.env` file in the
project root (loaded automatically when this module is imported).
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path

from dotenv import load_dotenv

# Load .env from the project root (one level up from the package)
_env_path = Path(__file__).resolve().parent.parent / ".env"
load_dotenv(_env_path, override=False)


@dataclass
class Settings:
    # ------------------------------------------------------------------
    # Fetcher
    # ------------------------------------------------------------------
    user_agent: str = field(
        default_factory=lambda: os.environ.get(
            "TIDYSCRAPE_USER_AGENT",
            "Mozilla/5.0 (compatible; tidyscrape/0.1)",
        )
    )

    # ------------------------------------------------------------------
    # Logging
    # ------------------------------------------------------------------
    log_level: str = field(
        default_factory=lambda: os.environ.get("TIDYSCRAPE_LOG_LEVEL", "WARNING").upper()
    )


# Module-level singleton; import this everywhere:
#   from tidyscrape.config import settings
settings = Settings()
