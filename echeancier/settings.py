"""
echeancier.settings
===================

Configuration settings for the Echeancier application.

Module‑level constants cover the storage and HTTP layers and can be
overridden via ``ECHEANCIER_*`` environment variables.  The pydantic
``Settings`` model holds the log level and the defaults applied when
obligations are materialised.  The engine modules never import this file; only the
stores, the API and the scripts do.
"""

from __future__ import annotations

import os
from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings

# ---------------------------------------------------------------------------
# Base directories
# ---------------------------------------------------------------------------
# Base directory of the project
BASE_DIR = Path(__file__).resolve().parent.parent

# Database settings
# ---------------------------------------------------------------------------
DB_FILE = os.environ.get("ECHEANCIER_DB_FILE", str(BASE_DIR / "echeancier.db"))
DB_URL = f"sqlite:///{DB_FILE}"
DB_ECHO = os.environ.get("ECHEANCIER_DB_ECHO", "False").lower() == "true"

# API settings
# ---------------------------------------------------------------------------
API_HOST = os.environ.get("ECHEANCIER_API_HOST", "127.0.0.1")
API_PORT = int(os.environ.get("ECHEANCIER_API_PORT", "8000"))
API_DEBUG = os.environ.get("ECHEANCIER_API_DEBUG", "False").lower() == "true"

# Logging
# ---------------------------------------------------------------------------
LOG_LEVEL = os.environ.get("ECHEANCIER_LOG_LEVEL", "INFO").upper()


# ---------------------------------------------------------------------------
# Pydantic settings model for obligation generation
# ---------------------------------------------------------------------------
class Settings(BaseSettings):
    """Pydantic model for application settings, loaded from environment variables."""

    log_level: str = Field(LOG_LEVEL, description="Root logging level used by the API")
    default_currency: str = Field("MAD", description="Currency stamped on newly materialised obligations")
    system_user: str = Field("system", description="created_by label for automated generation runs")
    generation_horizon_years: int = Field(
        1, ge=1, le=5, description="How many calendar years ahead a generation run materialises"
    )

    class Config:
        """Configuration for the settings model."""
        env_prefix = "ECHEANCIER_"
        env_file = ".env"  # load from .env file if present
        case_sensitive = False  # case-insensitive environment variables
        extra = "ignore"


# Initialize settings
settings = Settings()
