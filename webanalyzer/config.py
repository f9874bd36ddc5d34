"""Centralised settings for the webpage analyzer form.

All runtime configuration is resolved here in one place.  Values can be
overridden via environment variables or a `.env` file in the project root
(loaded automatically when this module is imported).
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path

from dotenv import load_dotenv

# Load .env from the project root (two levels up from this file)
_env_path = Path(__file__).resolve().parent.parent / ".env"
load_dotenv(_env_path, override=False)


def _optional_float(raw: str | None) -> float | None:
    """Parse a timeout value; empty or ``0`` disables it."""
    if raw is None or not raw.strip():
        return None
    value = float(raw)
    return value if value > 0 else None


@dataclass
class Settings:
    # ------------------------------------------------------------------
    # Analyzer service
    # ------------------------------------------------------------------
    analyzer_base_url: str = field(
        default_factory=lambda: os.environ.get(
            "ANALYZER_BASE_URL", "http://localhost:8082"
        )
    )
    analyzer_timeout: float | None = field(
        default_factory=lambda: _optional_float(
            os.environ.get("ANALYZER_TIMEOUT", "30")
        )
    )

    @property
    def analyze_endpoint(self) -> str:
        """Absolute URL of the ``POST /api/analyze`` endpoint."""
        return self.analyzer_base_url.rstrip("/") + "/api/analyze"

    # ------------------------------------------------------------------
    # Web host
    # ------------------------------------------------------------------
    web_host: str = field(
        default_factory=lambda: os.environ.get("WEB_HOST", "127.0.0.1")
    )
    web_port: int = field(
        default_factory=lambda: int(os.environ.get("WEB_PORT", "8000"))
    )

    # ------------------------------------------------------------------
    # Logging
    # ------------------------------------------------------------------
    log_level: str = field(
        default_factory=lambda: os.environ.get("LOG_LEVEL", "WARNING").upper()
    )


# Module-level singleton — import this everywhere:
#   from webanalyzer.config import settings
settings = Settings()
