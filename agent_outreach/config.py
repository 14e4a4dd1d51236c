"""
Application configuration management.

Loads settings from environment variables with sensible defaults. The
values are read once here and handed to clients as constructor arguments;
nothing below the CLI reads the environment directly.
"""

import os
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

# Load .env file from package directory
_PACKAGE_DIR = Path(__file__).parent
_PROJECT_ROOT = _PACKAGE_DIR.parent

# Try loading .env from multiple locations
for env_path in [_PACKAGE_DIR / ".env", _PROJECT_ROOT / ".env"]:
    if env_path.exists():
        load_dotenv(env_path)
        break


def _bool_env(name: str, default: str) -> bool:
    return os.getenv(name, default).strip().lower() in ("true", "1", "yes")


def _optional_int_env(name: str) -> Optional[int]:
    value = os.getenv(name, "").strip()
    return int(value) if value else None


class Config:
    """Application configuration loaded from environment variables."""

    # ========================================
    # Runtime
    # ========================================
    ENABLE_DEBUG: bool = _bool_env("ENABLE_DEBUG", "false")

    # ========================================
    # ag.dev
    # ========================================
    AG_DEV_API_KEY: str = os.getenv("AG_DEV_API_KEY", "")
    AG_DEV_BASE_URL: str = os.getenv("AG_DEV_BASE_URL", "https://api.ag.dev")

    # Agent ids
    COMPANY_PROFILE_AGENT_ID: str = os.getenv("COMPANY_PROFILE_AGENT_ID", "")
    COMPANY_CONTACTS_AGENT_ID: str = os.getenv("COMPANY_CONTACTS_AGENT_ID", "")
    COMPANY_CONTACT_PROFILE_AGENT_ID: str = os.getenv("COMPANY_CONTACT_PROFILE_AGENT_ID", "")
    CREATE_OUTREACH_EMAIL_AGENT_ID: str = os.getenv("CREATE_OUTREACH_EMAIL_AGENT_ID", "")

    # Run polling
    AGENT_POLL_INTERVAL_SECONDS: float = float(os.getenv("AGENT_POLL_INTERVAL_SECONDS", "1.0"))
    AGENT_TIMEOUT_SECONDS: float = float(os.getenv("AGENT_TIMEOUT_SECONDS", "0"))
    AGENT_MAX_CONCURRENCY: Optional[int] = _optional_int_env("AGENT_MAX_CONCURRENCY")

    # ========================================
    # Arcade (Gmail drafts)
    # ========================================
    ARCADE_API_KEY: str = os.getenv("ARCADE_API_KEY", "")
    ARCADE_USER_ID: str = os.getenv("ARCADE_USER_ID", "")

    @classmethod
    def agent_ids(cls) -> dict[str, str]:
        """Agent ids used by the outreach pipeline, keyed by env var name."""
        return {
            "COMPANY_PROFILE_AGENT_ID": cls.COMPANY_PROFILE_AGENT_ID,
            "COMPANY_CONTACTS_AGENT_ID": cls.COMPANY_CONTACTS_AGENT_ID,
            "COMPANY_CONTACT_PROFILE_AGENT_ID": cls.COMPANY_CONTACT_PROFILE_AGENT_ID,
            "CREATE_OUTREACH_EMAIL_AGENT_ID": cls.CREATE_OUTREACH_EMAIL_AGENT_ID,
        }

    @classmethod
    def validate(cls) -> list[str]:
        """Validate configuration and return list of errors."""
        errors = []

        if not cls.AG_DEV_API_KEY:
            errors.append("AG_DEV_API_KEY is not set")

        for name, value in cls.agent_ids().items():
            if not value:
                errors.append(f"{name} is not set")

        if cls.AGENT_POLL_INTERVAL_SECONDS < 0:
            errors.append("AGENT_POLL_INTERVAL_SECONDS must not be negative")
        if cls.AGENT_TIMEOUT_SECONDS < 0:
            errors.append("AGENT_TIMEOUT_SECONDS must not be negative")
        if cls.AGENT_MAX_CONCURRENCY is not None and cls.AGENT_MAX_CONCURRENCY < 1:
            errors.append("AGENT_MAX_CONCURRENCY must be at least 1")

        return errors


# Create singleton instance
config = Config()
