"""
Store Build Orchestrator — The ordered build sequence for a GlamorousDesi store.

Steps:
1. store_settings   PUT /shop (contact, locale, currency; update in place)
2. theme            find or create the theme, wait for processing, write
                    config/settings_data.json, publish if not already main
3. collections      5 custom collections + 3 smart (rule-based) collections
4. navigation       no REST endpoint for menus; manual step in Shopify admin
5. pages            About, Book Appointment, Shipping/Return policy, Size Guide
6. products         5 seed products, one variant per size
7. shipping         placeholder (shipping zones need the GraphQL Admin API)
8. automation       register webhooks, then schedule the maintenance jobs
9. checkout         placeholder

Every step runs even if an earlier one failed; the BuildReport says which did.
Only AuthenticationError (token rejected) aborts build_complete_store().

Creation steps look resources up by handle before POSTing, so a re-run
against a partially built store reports SKIPPED_EXISTING instead of creating
duplicates.

Typical usage:
    client = StoreRESTClient(Session(shop, token))
    orchestrator = StoreBuildOrchestrator.from_settings(settings, client, scheduler)
    report = orchestrator.build_complete_store()
    orchestrator.print_summary(report)
"""

import time
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Optional

from config import DEFAULT_SETTINGS, PRODUCT_SYNC_CRON, WEEKLY_CLEANUP_CRON

from . import catalog
from .errors import ConflictError
from .maintenance import cleanup_old_products, sync_products
from .scheduler import SchedulerHandle
from .step_runner import BuildReport, BuildStep, ItemOutcome, StepRunner, run_idempotent
from .theme_installer import ThemeInstaller
from .webhooks import WebhookRegistrar, default_subscriptions


class StoreBuildOrchestrator:
    """Builds one shop through an injected StoreRESTClient."""

    def __init__(
        self,
        client,
        scheduler: SchedulerHandle,
        app_url: str = "",
        theme_name: str = DEFAULT_SETTINGS["THEME_NAME"],
        theme_source_url: str = DEFAULT_SETTINGS["THEME_SOURCE_URL"],
        theme_ready_timeout: float = DEFAULT_SETTINGS["THEME_READY_TIMEOUT"],
        theme_poll_interval: float = DEFAULT_SETTINGS["THEME_POLL_INTERVAL"],
        enable_automation: bool = True,
        registrar: Optional[WebhookRegistrar] = None,
        runner: Optional[StepRunner] = None,
        output_manager=None,
        sleep: Callable[[float], None] = time.sleep,
        clock: Callable[[], float] = time.monotonic,
        now: Optional[Callable[[], datetime]] = None,
        debug: bool = False,
    ):
        self.client = client
        self.shop = client.shop
        self.scheduler = scheduler
        self.app_url = app_url.rstrip("/")
        self.enable_automation = enable_automation
        self.registrar = registrar or WebhookRegistrar(client, debug)
        self.runner = runner or StepRunner(debug)
        self.output_manager = output_manager
        self.debug = debug
        self._now = now or (lambda: datetime.now(timezone.utc))
        self.theme_installer = ThemeInstaller(
            client,
            theme_name,
            theme_source_url,
            ready_timeout=theme_ready_timeout,
            poll_interval=theme_poll_interval,
            sleep=sleep,
            clock=clock,
            debug=debug,
        )

    @classmethod
    def from_settings(cls, settings, client, scheduler: SchedulerHandle, output_manager=None, **kwargs):
        """Create an orchestrator configured from AppSettings.

        Args:
            settings: AppSettings (or any object with the same attributes).
            client: StoreRESTClient bound to the shop being built.
            scheduler: Process-wide SchedulerHandle for the maintenance jobs.
            output_manager: Used only when settings.save_json is true.
            **kwargs: Passed through (sleep, clock, now, registrar, runner).

        Returns:
            A ready StoreBuildOrchestrator.
        """
        return cls(
            client,
            scheduler,
            app_url=settings.app_url,
            theme_name=settings.theme_name,
            theme_source_url=settings.theme_source_url,
            theme_ready_timeout=settings.theme_ready_timeout,
            theme_poll_interval=settings.theme_poll_interval,
            enable_automation=settings.enable_automation,
            output_manager=output_manager if settings.save_json else None,
            debug=settings.debug,
            **kwargs,
        )

    def build_steps(self) -> List[BuildStep]:
        return [
            BuildStep("store_settings", self.configure_store_settings),
            BuildStep("theme", self.setup_theme),
            BuildStep("collections", self.create_collections),
            BuildStep("navigation", self.create_navigation, ("collections",)),
            BuildStep("pages", self.create_pages),
            BuildStep("products", self.import_products, ("collections",)),
            BuildStep("shipping", self.configure_shipping),
            BuildStep("automation", self.setup_automation, ("products",)),
            BuildStep("checkout", self.configure_checkout),
        ]

    def build_complete_store(self) -> BuildReport:
        """Run every build step in order.

        Returns:
            BuildReport with one result per step, in order.

        Raises:
            AuthenticationError: The store rejected the access token. Steps
                after the rejected one are not attempted.
        """
        print(f"\n{'='*60}")
        print(f"BUILDING STORE: {self.shop}")
        print("="*60)

        report = self.runner.run(self.build_steps(), shop=self.shop)

        if self.output_manager is not None:
            self.output_manager.save_report(report)

        return report

    # ------------------------------------------------------------------
    # Steps
    # ------------------------------------------------------------------

    def configure_store_settings(self) -> str:
        self.client.put("shop", {"shop": catalog.SHOP_SETTINGS})
        print("  Store settings configured")
        return "shop settings updated"

    def setup_theme(self) -> str:
        return self.theme_installer.install()

    def create_collections(self) -> str:
        custom = run_idempotent(
            catalog.CUSTOM_COLLECTIONS,
            create=lambda c: self._create_unless_exists("custom_collections", "custom_collection", c),
            label=lambda c: f"collection {c['title']}",
            debug=self.debug,
        )
        smart = run_idempotent(
            catalog.smart_collections(self._now()),
            create=lambda c: self._create_unless_exists("smart_collections", "smart_collection", c),
            label=lambda c: f"smart collection {c['title']}",
            debug=self.debug,
        )
        return _merge(custom, smart).raise_for_outcome("collections")

    def create_navigation(self) -> str:
        # Menus have no REST Admin endpoint.
        print("  Navigation menus must be set up in Shopify admin (Online Store > Navigation)")
        return "manual: no REST endpoint for navigation menus"

    def create_pages(self) -> str:
        outcome = run_idempotent(
            catalog.pages(),
            create=lambda p: self._create_unless_exists("pages", "page", p),
            label=lambda p: f"page {p['title']}",
            debug=self.debug,
        )
        return outcome.raise_for_outcome("pages")

    def import_products(self) -> str:
        outcome = run_idempotent(
            catalog.seed_products(),
            create=lambda p: self._create_unless_exists("products", "product", p),
            label=lambda p: f"product {p['title']}",
            debug=self.debug,
        )
        return outcome.raise_for_outcome("products")

    def configure_shipping(self) -> str:
        print("  Shipping zones are not configured by this build")
        return "placeholder"

    def setup_automation(self) -> str:
        outcome = self.registrar.register_all(default_subscriptions(self.app_url))

        if self.enable_automation:
            self.schedule_maintenance()
        else:
            print("  Recurring jobs disabled (ENABLE_AUTOMATION=false)")

        return outcome.raise_for_outcome("webhooks")

    def configure_checkout(self) -> str:
        print("  Checkout settings are not configured by this build")
        return "placeholder"

    # ------------------------------------------------------------------

    def schedule_maintenance(self):
        """Register the daily sync and weekly cleanup, one set per shop."""
        self.scheduler.schedule(
            PRODUCT_SYNC_CRON,
            lambda: sync_products(self.client),
            name="product_sync",
            key=f"{self.shop}:product_sync",
        )
        self.scheduler.schedule(
            WEEKLY_CLEANUP_CRON,
            lambda: cleanup_old_products(self.client),
            name="weekly_cleanup",
            key=f"{self.shop}:weekly_cleanup",
        )

    def _create_unless_exists(self, resource: str, root_key: str, item: Dict[str, Any]):
        """POST item unless a record with its handle exists (ConflictError then)."""
        handle = item.get("handle")
        if handle:
            found = self.client.get(resource, params={"handle": handle, "fields": "id"})
            if found.get(resource):
                raise ConflictError(f"{handle} already exists", None, "POST", resource)
        return self.client.post(resource, {root_key: {**item, "published": True}})

    def print_summary(self, report: BuildReport):
        print(f"\n{'='*60}")
        print("BUILD COMPLETE")
        print("="*60)
        print(f"Shop: {report.shop}")
        print(f"Status: {'SUCCESS' if report.succeeded else 'COMPLETED WITH FAILURES'}")

        for result in report.results:
            line = f"  {result.step_name:<16} {result.status.value}"
            if result.error:
                line += f"  ({result.error})"
            elif result.detail and self.debug:
                line += f"  ({result.detail})"
            print(line)

        if report.failed_steps:
            print(f"\nFailed steps: {', '.join(report.failed_steps)}")
            print("  Re-run the build once the errors are fixed; completed steps are skipped.")


def _merge(*outcomes: ItemOutcome) -> ItemOutcome:
    merged = ItemOutcome()
    for outcome in outcomes:
        merged.created.extend(outcome.created)
        merged.existing.extend(outcome.existing)
        merged.failed.update(outcome.failed)
    return merged
