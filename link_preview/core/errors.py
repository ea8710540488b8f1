"""
Failure taxonomy for link preview generation.

Every failure is terminal for the current call; nothing here is retried.
"""

from __future__ import annotations

import httpx


class LinkPreviewError(Exception):
    """Base class for all link preview failures."""

    code = "linkPreviewError"

    def __init__(self, message: str | None = None):
        super().__init__(message or self.code)


class FeatureDisabledError(LinkPreviewError):
    """Link previews are turned off in settings."""

    code = "featureDisabled"


class FetchFailureError(LinkPreviewError):
    """Non-2xx status, rejected redirect, oversized transfer or transport error."""

    code = "fetchFailure"


class InvalidPreviewError(LinkPreviewError):
    """Fetched content was empty, undecodable, too large or otherwise unusable."""

    code = "invalidPreview"


class NoPreviewError(LinkPreviewError):
    """The pipeline finished but the draft has neither a title nor an image."""

    code = "noPreview"


def is_network_failure(error: BaseException) -> bool:
    """Return True when error originates from the network rather than a bug."""
    if isinstance(error, (httpx.TransportError, FetchFailureError, TimeoutError, ConnectionError)):
        return True
    cause = error.__cause__
    return cause is not None and cause is not error and is_network_failure(cause)
