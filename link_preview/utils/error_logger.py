"""
Structured error logging for the preview pipelines.

Errors are written through the standard logging tree, so the JSONL error
handler installed by link_preview/core/logging.py picks them up.

Usage:
    from link_preview.utils.error_logger import log_error, log_http_error

    log_error("group_invite", error, operation="fetch_avatar", context={"path": path})
    log_http_error("preview_http_client", url="https://...", response=resp)
"""

import logging
from typing import Any

from link_preview.core.logging import get_logger


def _extract_http_details(response: Any) -> dict[str, Any]:
    """Extract useful details from an httpx response object.

    The body is deliberately left out: it may be large and is untrusted.
    """
    details: dict[str, Any] = {}

    if hasattr(response, "status_code"):
        details["status_code"] = response.status_code
    if hasattr(response, "headers"):
        details["headers"] = {
            k: v[:200] if isinstance(v, str) else v for k, v in dict(response.headers).items()
        }
    try:
        request = response.request
    except RuntimeError:
        # httpx raises when a response was built without a request
        request = None
    if request is not None:
        details["method"] = request.method
        details["request_url"] = str(request.url)

    return details


def log_error(
    component: str,
    error: BaseException,
    *,
    operation: str | None = None,
    context: dict[str, Any] | None = None,
    http_response: Any | None = None,
    level: int = logging.ERROR,
) -> None:
    """Log an error with full context to the console and the JSONL error log.

    Args:
        component: Component name for identifying the source of errors.
        error: The exception that occurred.
        operation: Name of the operation that failed.
        context: Additional context data.
        http_response: HTTP response object (if applicable).
        level: Log level; warnings skip the stack trace.
    """
    logger = get_logger(f"error.{component}")

    http_details = _extract_http_details(http_response) if http_response is not None else None

    operation_str = f" during {operation}" if operation else ""
    message = f"{component} error{operation_str}: {error}"

    logger.log(
        level,
        message,
        exc_info=error if level >= logging.ERROR else None,
        extra={
            "component": component,
            "operation": operation,
            "context_data": context,
            "http_details": http_details,
            "error_type": type(error).__name__,
            "error_message": str(error),
        },
    )


def log_http_error(
    component: str,
    url: str,
    *,
    response: Any | None = None,
    error: BaseException | None = None,
    operation: str | None = None,
    context: dict[str, Any] | None = None,
) -> None:
    """Log HTTP-specific errors with response details.

    HTTP failures are expected for arbitrary user-shared links, so they are
    logged as warnings.

    Args:
        component: Component name for identifying the source of errors.
        url: The URL that was requested.
        response: HTTP response object (if available).
        error: The exception that occurred (if any).
        operation: Name of the operation that failed.
        context: Additional context data.
    """
    full_context: dict[str, Any] = {"url": url}
    if context:
        full_context.update(context)

    if error is None:
        status_code = getattr(response, "status_code", "unknown")
        error = Exception(f"HTTP error for {url} (status: {status_code})")

    log_error(
        component,
        error,
        operation=operation or "http_request",
        context=full_context,
        http_response=response,
        level=logging.WARNING,
    )
