"""
Simple configuration management.

The ``Settings`` dataclass reads configuration directly from environment
variables.  Defaults are provided for all fields so the service starts
with no configuration at all; override them via the environment in a
real deployment.

Fee constants live in ``services.fee_service``, not here.
"""

import os
from dataclasses import dataclass


@dataclass
class Settings:
    """Application settings loaded from environment variables."""

    project_name: str = os.getenv("PROJECT_NAME", "Pro Directory API")
    api_version: str = os.getenv("API_VERSION", "1.0.0")
    debug: bool = os.getenv("DEBUG", "false").lower() in {"1", "true", "yes"}
    log_level: str = os.getenv("LOG_LEVEL", "INFO")
    log_file: str = os.getenv("LOG_FILE", "")
    secret_key: str = os.getenv("SECRET_KEY", "change_me")
    access_token_expire_minutes: int = int(os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", str(60 * 24)))

    # Long-lived token accepted as an administrator without decoding.
    # Leave empty to disable.
    admin_static_token: str = os.getenv("ADMIN_TOKEN", "")

    # Path to the SQLite database.  Relative paths are resolved against
    # the project root by ``core.db``.
    database_url: str = os.getenv("DATABASE_URL", "pro_directory.db")

    # Seconds a writer waits for another writer's transaction to finish.
    database_timeout: float = float(os.getenv("DATABASE_TIMEOUT", "10"))

    currency: str = os.getenv("CURRENCY", "USD")


# Environment variables must be set before this module is imported.
settings = Settings()
