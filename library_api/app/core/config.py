"""
Simple configuration management.

The ``Settings`` dataclass reads configuration directly from
environment variables so that the service needs nothing beyond FastAPI
and uvicorn to start.  Defaults are provided for all fields.  In a
deployment you should override these via environment variables.
"""

import os
from dataclasses import dataclass


@dataclass
class Settings:
    """Application settings loaded from environment variables."""

    project_name: str = os.getenv("PROJECT_NAME", "Library API")
    api_version: str = os.getenv("API_VERSION", "1.0.0")
    debug: bool = os.getenv("DEBUG", "false").lower() in {"1", "true", "yes"}
    log_level: str = os.getenv("LOG_LEVEL", "INFO")

    # Optional path of a log file.  When empty, logs only go to the
    # console.
    log_file: str = os.getenv("LOG_FILE", "")

    # Prefix under which the API router is mounted.  The library
    # controller adds its own ``/library`` segment, so the default
    # yields ``/api/library``.
    api_prefix: str = os.getenv("API_PREFIX", "/api")

    # Bind address used by ``run.py``.
    host: str = os.getenv("HOST", "0.0.0.0")
    port: int = int(os.getenv("PORT", "8000"))


# Instantiate settings once so other modules can import it without
# repeatedly reading environment variables.  Environment variables must
# be set before importing this module.
settings = Settings()
