from .settings import (
    DEFAULT_SETTINGS,
    DEFAULT_SCOPES,
    API_VERSION,
    PRODUCT_SYNC_CRON,
    WEEKLY_CLEANUP_CRON,
    CLEANUP_MAX_AGE_DAYS,
)
