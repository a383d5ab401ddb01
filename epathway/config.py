"""Centralised settings for the ePathway scraper.

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


@dataclass
class Settings:
    # ------------------------------------------------------------------
    # Workspace / storage
    # ------------------------------------------------------------------
    workspace_dir: Path = field(
        default_factory=lambda: Path(
            os.environ.get("EPATHWAY_WORKSPACE", Path.home() / ".epathway_data")
        )
    )

    @property
    def db_path(self) -> Path:
        """Absolute path to the SQLite database file."""
        return self.workspace_dir / "data.sqlite"

    @property
    def schema_path(self) -> Path:
        """Absolute path to the schema SQL file bundled with the package."""
        return Path(__file__).resolve().parent / "db" / "schema.sql"

    # ------------------------------------------------------------------
    # Portal
    # ------------------------------------------------------------------
    base_url: str = field(
        default_factory=lambda: os.environ.get(
            "EPATHWAY_BASE_URL", "https://epathway.wtcc.sa.gov.au/ePathway/Production"
        )
    )
    comment_url: str = field(
        default_factory=lambda: os.environ.get(
            "EPATHWAY_COMMENT_URL", "mailto:csu@wtcc.sa.gov.au"
        )
    )

    # ------------------------------------------------------------------
    # Scraper
    # ------------------------------------------------------------------
    request_timeout: float = field(
        default_factory=lambda: float(os.environ.get("REQUEST_TIMEOUT", "30.0"))
    )
    # "ignore" keeps the first stored copy, "replace" overwrites it
    duplicate_policy: str = field(
        default_factory=lambda: os.environ.get("DUPLICATE_POLICY", "ignore")
    )

    def ensure_workspace(self) -> None:
        """Create the workspace directory if it does not exist."""
        self.workspace_dir.mkdir(parents=True, exist_ok=True)


# Module-level singleton; import this everywhere:
#   from epathway.config import settings
settings = Settings()
