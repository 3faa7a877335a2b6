from .errors import (
    StoreBuildError,
    RemoteApiError,
    ConflictError,
    AuthenticationError,
    ThemeNotReadyError,
)
from .session_store import Session, SessionStore
from .store_client import StoreRESTClient
from .step_runner import BuildStep, BuildResult, BuildReport, StepRunner, StepStatus
from .scheduler import SchedulerHandle, ScheduledTask
from .webhooks import WebhookRegistrar, WebhookSubscription, verify_webhook_hmac
from .theme_installer import ThemeInstaller
from .output_manager import OutputManager
from .oauth import ShopifyOAuth
from .app_settings import AppSettings
from .orchestrator import StoreBuildOrchestrator
