"""
Utility Functions

Helper utilities shared by the parser, analyzer and reporters.
"""

import logging
from typing import Optional

logger = logging.getLogger(__name__)


# === Text Processing ===

def truncate(text: str, max_len: int) -> str:
    """Truncate text to max_len characters, ellipsis included."""
    if len(text) <= max_len:
        return text
    return text[:max_len - 3] + "..."


def format_bytes(size: float) -> str:
    """Format a byte count using binary units (1.5 KB, 3.2 MB...)."""
    unit = 1024
    size = int(size)
    if size < unit:
        return f"{size} B"

    div, exp = unit, 0
    n = size // unit
    while n >= unit:
        div *= unit
        exp += 1
        n //= unit

    return f"{size / div:.1f} {'KMGTPE'[exp]}B"


# === HTTP Utilities ===

HTTP_STATUS_MESSAGES = {
    200: "OK",
    201: "Created",
    202: "Accepted",
    204: "No Content",
    301: "Moved Permanently",
    302: "Found",
    304: "Not Modified",
    400: "Bad Request",
    401: "Unauthorized",
    403: "Forbidden",
    404: "Not Found",
    405: "Method Not Allowed",
    406: "Not Acceptable",
    408: "Request Timeout",
    409: "Conflict",
    410: "Gone",
    422: "Unprocessable Entity",
    429: "Too Many Requests",
    500: "Internal Server Error",
    501: "Not Implemented",
    502: "Bad Gateway",
    503: "Service Unavailable",
    504: "Gateway Timeout",
}


def get_status_description(status_code: int) -> str:
    """Human readable reason phrase for a status code."""
    return HTTP_STATUS_MESSAGES.get(status_code, "Unknown")


def is_error_status(status_code: int) -> bool:
    """Check if HTTP status indicates an error."""
    return status_code >= 400


def status_class(status_code: int) -> Optional[str]:
    """
    Map a status code to its class name.

    Returns one of 'success', 'redirect', 'client_error', 'server_error',
    or None for informational/unknown codes.
    """
    if 200 <= status_code < 300:
        return "success"
    if 300 <= status_code < 400:
        return "redirect"
    if 400 <= status_code < 500:
        return "client_error"
    if status_code >= 500:
        return "server_error"
    return None


# === Logging Setup ===

def setup_logging(
    level: int = logging.INFO,
    log_file: Optional[str] = None,
    format_str: str = None,
):
    """Configure logging for the application."""
    if format_str is None:
        format_str = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'

    handlers = [logging.StreamHandler()]

    if log_file:
        handlers.append(logging.FileHandler(log_file))

    logging.basicConfig(
        level=level,
        format=format_str,
        handlers=handlers,
    )
