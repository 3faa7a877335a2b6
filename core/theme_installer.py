"""
Theme Installer - Find or create the store theme, configure it, publish it.

A theme created from a zip archive is processed asynchronously by Shopify;
until "processing" turns false its assets cannot be written. Instead of a
fixed sleep the installer polls GET /themes/{id} with exponential backoff
(poll_interval, 2x, 4x ... capped at 8x poll_interval) and raises
ThemeNotReadyError once ready_timeout seconds have elapsed.

The same wait applies to an existing theme found still processing, which is
what a re-run sees after an earlier build timed out.
"""

import time
from typing import Any, Callable, Dict, Optional

from .catalog import theme_settings_asset
from .errors import ThemeNotReadyError

MAIN_ROLE = "main"
MAX_BACKOFF_FACTOR = 8


class ThemeInstaller:
    """Installs and publishes a named theme through a StoreRESTClient.

    Attributes:
        theme_name: Name the theme is created under and looked up by.
        source_url: Zip archive Shopify downloads the theme from.
        ready_timeout: Seconds to wait for processing before giving up.
        poll_interval: First delay between readiness checks.
    """

    def __init__(
        self,
        client,
        theme_name: str,
        source_url: str,
        ready_timeout: float = 120,
        poll_interval: float = 2,
        sleep: Callable[[float], None] = time.sleep,
        clock: Callable[[], float] = time.monotonic,
        debug: bool = False,
    ):
        self.client = client
        self.theme_name = theme_name
        self.source_url = source_url
        self.ready_timeout = ready_timeout
        self.poll_interval = poll_interval
        self._sleep = sleep
        self._clock = clock
        self.debug = debug

    def find_theme(self) -> Optional[Dict[str, Any]]:
        """Look up the theme by name.

        Returns:
            The theme record from GET /themes, or None if no theme has this name.
        """
        themes = self.client.get("themes").get("themes", [])
        for theme in themes:
            if theme.get("name") == self.theme_name:
                return theme
        return None

    def create_theme(self) -> Dict[str, Any]:
        """Create an unpublished theme from source_url.

        Returns:
            The new theme record. It is normally still processing.
        """
        body = self.client.post("themes", {
            "theme": {"name": self.theme_name, "src": self.source_url}
        })
        theme = body["theme"]
        print(f"  Created theme {theme.get('id')}: {self.theme_name}")
        return theme

    def wait_for_theme_ready(self, theme: Dict[str, Any]) -> Dict[str, Any]:
        """Poll until the theme stops processing.

        Args:
            theme: Theme record as returned by create_theme or find_theme.

        Returns:
            The latest theme record, with processing false.

        Raises:
            ThemeNotReadyError: The deadline passed, or Shopify reported
                processing_failed.
        """
        theme_id = theme["id"]
        started = self._clock()
        delay = self.poll_interval

        while theme.get("processing", False):
            waited = self._clock() - started
            if waited >= self.ready_timeout:
                raise ThemeNotReadyError(theme_id, waited)

            delay = min(delay, self.ready_timeout - waited)
            if self.debug:
                print(f"  Theme {theme_id} processing, next check in {delay:.1f}s")
            self._sleep(delay)
            delay = min(delay * 2, self.poll_interval * MAX_BACKOFF_FACTOR)

            theme = self.client.get(f"themes/{theme_id}")["theme"]

        if theme.get("processing_failed"):
            raise ThemeNotReadyError(
                theme_id, self._clock() - started, reason="failed processing on Shopify"
            )

        return theme

    def write_settings(self, theme: Dict[str, Any]):
        self.client.put(f"themes/{theme['id']}/assets", {"asset": theme_settings_asset()})

    def publish(self, theme: Dict[str, Any]) -> bool:
        """Make the theme the live theme. Returns False if it already was."""
        if theme.get("role") == MAIN_ROLE:
            return False
        self.client.put(f"themes/{theme['id']}", {"theme": {"role": MAIN_ROLE}})
        return True

    def install(self) -> str:
        """Find or create the theme, wait for it, write settings and publish.

        Returns:
            A short detail string for the build report.
        """
        theme = self.find_theme()
        if theme is None:
            theme = self.create_theme()
        elif self.debug:
            print(f"  Using existing theme {theme.get('id')}")

        theme = self.wait_for_theme_ready(theme)

        self.write_settings(theme)
        published = self.publish(theme)

        status = "published" if published else "already published"
        print(f"  Theme configured and {status}")
        return f"theme {theme['id']} {status}"
