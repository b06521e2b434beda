"""
Log-safety helpers for client-supplied data.
"""

from __future__ import annotations

import re

from status_hub.components.core.constants import HubConstants

# Control characters, zero-width marks and bidirectional overrides
_CONTROL_CHAR_PATTERN = re.compile(
    r'[\x00-\x1f\x7f-\x9f'  # ASCII control characters
    r'\u200b-\u200f'  # Zero-width and direction marks
    r'\u202a-\u202e'  # Bidirectional text formatting (RTL override, etc.)
    r'\u2066-\u2069'  # Isolate formatting characters
    r'\ufeff]'  # BOM / Zero-width no-break space
)


def sanitize_log_data(data: str | bytes, max_length: int = HubConstants.LOG_MESSAGE_PREVIEW) -> str:
    """
    Sanitize user-provided data before logging.

    Truncates first so escaping cannot push the output over ``max_length``,
    then strips control characters and escapes quotes and backslashes.

    Args:
        data: Raw user data.
        max_length: Maximum length to include in logs.

    Returns:
        Sanitized, truncated string safe for structured logging.
    """
    if isinstance(data, bytes):
        data = data.decode("utf-8", errors="replace")

    was_truncated = len(data) > max_length
    truncated = data[:max_length] if was_truncated else data

    sanitized = _CONTROL_CHAR_PATTERN.sub('', truncated)
    sanitized = sanitized.replace('\\', '\\\\')
    sanitized = sanitized.replace('"', '\\"')

    if was_truncated:
        return sanitized + "..."
    return sanitized
