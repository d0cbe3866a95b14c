"""
Log sanitizing for carrier payloads.

Carrier error bodies can echo addresses, phone numbers and credentials.
Anything written to logs from a carrier exchange goes through
sanitize_for_logging first.
"""
import json
import re
from typing import Any

_PATTERNS = [
    # Credentials
    (r'(?i)\b(Bearer|Basic)\s+[A-Za-z0-9._~+/=-]+', r'\1 [REDACTED]'),
    (r'(?i)("?(?:access_token|client_secret|refresh_token)"?\s*[:=]\s*)"?[^",\s}]+"?', r'\1"[REDACTED]"'),
    # Emails
    (r'\b[A-Za-z0-9._%+-]+@[A-Za-z0-9.-]+\.[A-Za-z]{2,}\b', '[EMAIL]'),
    # Phone numbers
    (r'\b\d{3}[-.\s]?\d{3}[-.\s]?\d{4}\b', '[PHONE]'),
    (r'\b\(\d{3}\)\s*\d{3}[-.\s]?\d{4}\b', '[PHONE]'),
]


def sanitize_for_logging(value: Any, max_length: int = 500) -> str:
    """
    Render a value as text safe for logging.

    Args:
        value: String, dict/list payload, or any other object
        max_length: Maximum length of result

    Returns:
        Sanitized, truncated text
    """
    if value is None:
        return ""

    if isinstance(value, str):
        text = value
    else:
        try:
            text = json.dumps(value, default=str)
        except (TypeError, ValueError):
            text = repr(value)

    sanitized = text[: max_length * 2]
    for pattern, replacement in _PATTERNS:
        sanitized = re.sub(pattern, replacement, sanitized)

    return sanitized[:max_length]
