"""
Settings — Default configuration values for the Shopify store builder.

This module provides the DEFAULT_SETTINGS dict that AppSettings uses as
fallback values when environment variables are not set. The actual
configuration is loaded from .env at runtime.

Configuration precedence (highest to lowest):
  1. CLI flags (--debug, --no-automation, --port)
  2. Environment variables (from .env file)
  3. DEFAULT_SETTINGS (this file)

Settings reference:
  SHOPIFY_API_VERSION     Admin REST API version used in every request path
  SHOPIFY_SCOPES          OAuth scopes requested during app install
  THEME_NAME              Name of the theme the build installs and publishes
  THEME_SOURCE_URL        Zip archive the theme is created from
  THEME_READY_TIMEOUT     Seconds to wait for a new theme to finish processing
  THEME_POLL_INTERVAL     First delay between theme status polls (doubles each poll)
  SESSION_STORE_PATH      JSON file holding OAuth sessions
  OUTPUT_DIR              Where to write build reports (default: ./output)
  OUTPUT_RETENTION_DAYS   How many days to keep old report folders (0 = keep forever)
  SAVE_JSON               Whether to write build_report.json after each build
  ENABLE_AUTOMATION       Whether the automation step schedules recurring jobs
  DEBUG                   Whether to print verbose output
"""

API_VERSION = "2024-01"

DEFAULT_SCOPES = [
    "read_products", "write_products",
    "read_themes", "write_themes",
    "read_content", "write_content",
]

DEFAULT_SETTINGS = {
    "SHOPIFY_API_VERSION": API_VERSION,
    "SHOPIFY_SCOPES": ",".join(DEFAULT_SCOPES),
    "PORT": 3000,
    "THEME_NAME": "GlamorousDesi Premium",
    "THEME_SOURCE_URL": "https://github.com/Shopify/dawn/archive/main.zip",
    "THEME_READY_TIMEOUT": 120,
    "THEME_POLL_INTERVAL": 2,
    "SESSION_STORE_PATH": "./data/sessions.json",
    "OUTPUT_DIR": "./output",
    "OUTPUT_RETENTION_DAYS": 30,
    "SAVE_JSON": True,
    "ENABLE_AUTOMATION": True,
    "DEBUG": False,
}

# Cron expressions for the recurring maintenance jobs
PRODUCT_SYNC_CRON = "0 2 * * *"
WEEKLY_CLEANUP_CRON = "0 3 * * 0"

CLEANUP_MAX_AGE_DAYS = 28
