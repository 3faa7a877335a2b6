"""
Errors raised by the store builder.

RemoteApiError and its ConflictError subtype come from the REST client and are
recovered by the step runner. AuthenticationError is never recovered inside a
build: it aborts the run and surfaces at the HTTP/CLI layer.
"""

from typing import Optional


class StoreBuildError(Exception):
    """Base class for every error raised by this package."""


class RemoteApiError(StoreBuildError):
    """Non-2xx response (or transport failure) from the Shopify Admin API.

    Attributes:
        status_code: HTTP status, or None when no response was received.
        message: Error text extracted from the platform's "errors" field.
        method: HTTP method of the failed call.
        path: Resource path of the failed call (e.g. "themes/42/assets").
    """

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        method: str = "",
        path: str = "",
    ):
        self.message = message
        self.status_code = status_code
        self.method = method
        self.path = path
        super().__init__(self.__str__())

    def __str__(self) -> str:
        status = self.status_code if self.status_code is not None else "no response"
        where = f"{self.method} {self.path}".strip()
        if where:
            return f"{where} failed ({status}): {self.message}"
        return f"({status}) {self.message}"


class ConflictError(RemoteApiError):
    """The resource being created already exists."""


class AuthenticationError(StoreBuildError):
    """OAuth callback failure, or credentials rejected by the platform."""


class ThemeNotReadyError(StoreBuildError):
    """A theme is not usable: still processing at the deadline, or processing failed.

    Attributes:
        theme_id: Id of the theme that was polled.
        waited: Seconds spent polling before giving up.
        reason: Why the theme is unusable, or None for a timeout.
    """

    def __init__(self, theme_id, waited: float, reason: Optional[str] = None):
        self.theme_id = theme_id
        self.waited = waited
        self.reason = reason
        if reason is None:
            message = f"Theme {theme_id} still processing after {waited:.0f}s"
        else:
            message = f"Theme {theme_id} {reason}"
        super().__init__(message)
