"""
App Settings - Environment-driven configuration for the builder and server.

Values are read from a .env file (python-dotenv) and the process environment,
falling back to config.DEFAULT_SETTINGS.
"""

import os
from pathlib import Path
from typing import List

from dotenv import load_dotenv

from config import DEFAULT_SETTINGS


def _flag(name: str) -> bool:
    return os.getenv(name, str(DEFAULT_SETTINGS[name])).lower() == "true"


class AppSettings:
    """Configuration snapshot taken at construction time."""

    def __init__(self, env_file: str = "./.env"):
        env_path = Path(env_file)
        if env_path.exists():
            load_dotenv(env_path)
            print(f"Loaded configuration from: {env_file}")
        else:
            print(f"Warning: {env_file} not found, using defaults/environment")

        # Shopify app credentials
        self.api_key = os.getenv("SHOPIFY_API_KEY", "")
        self.api_secret = os.getenv("SHOPIFY_API_SECRET", "")
        self.scopes = os.getenv("SHOPIFY_SCOPES", DEFAULT_SETTINGS["SHOPIFY_SCOPES"])
        self.api_version = os.getenv("SHOPIFY_API_VERSION", DEFAULT_SETTINGS["SHOPIFY_API_VERSION"])

        # Server configuration
        self.host = os.getenv("HOST", "")
        self.app_url = os.getenv("APP_URL", "").rstrip("/")
        self.port = int(os.getenv("PORT", str(DEFAULT_SETTINGS["PORT"])))

        # Theme
        self.theme_name = os.getenv("THEME_NAME", DEFAULT_SETTINGS["THEME_NAME"])
        self.theme_source_url = os.getenv("THEME_SOURCE_URL", DEFAULT_SETTINGS["THEME_SOURCE_URL"])
        self.theme_ready_timeout = float(
            os.getenv("THEME_READY_TIMEOUT", str(DEFAULT_SETTINGS["THEME_READY_TIMEOUT"]))
        )
        self.theme_poll_interval = float(
            os.getenv("THEME_POLL_INTERVAL", str(DEFAULT_SETTINGS["THEME_POLL_INTERVAL"]))
        )

        # Persistence and output
        self.session_store_path = os.getenv("SESSION_STORE_PATH", DEFAULT_SETTINGS["SESSION_STORE_PATH"])
        self.output_dir = os.getenv("OUTPUT_DIR", DEFAULT_SETTINGS["OUTPUT_DIR"])
        self.retention_days = int(
            os.getenv("OUTPUT_RETENTION_DAYS", str(DEFAULT_SETTINGS["OUTPUT_RETENTION_DAYS"]))
        )

        # Processing options
        self.save_json = _flag("SAVE_JSON")
        self.enable_automation = _flag("ENABLE_AUTOMATION")
        self.debug = _flag("DEBUG")

    @property
    def scope_list(self) -> List[str]:
        return [s.strip() for s in self.scopes.split(",") if s.strip()]

    def validate(self, serve: bool = False) -> bool:
        """Print every missing required setting. Returns False if any is missing.

        App credentials and HOST are only needed to run the OAuth server; a
        CLI build with a ready access token does not need them.
        """
        errors = []
        if serve:
            if not self.api_key:
                errors.append("SHOPIFY_API_KEY is required")
            if not self.api_secret:
                errors.append("SHOPIFY_API_SECRET is required")
            if not self.host:
                errors.append("HOST is required")
        if not self.app_url:
            errors.append("APP_URL is required (webhook delivery address)")
        if self.theme_ready_timeout <= 0:
            errors.append("THEME_READY_TIMEOUT must be positive")

        if errors:
            print("\nConfiguration Errors:")
            for err in errors:
                print(f"  - {err}")
            return False
        return True
