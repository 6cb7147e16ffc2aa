"""
Destination normalization and masking.

Phone numbers are canonicalized heuristically (no per-country length
checks). Emails only need to look like ``local@domain.tld``.
"""

import html
import re
from typing import Optional

NON_DIGIT_PATTERN = re.compile(r"\D")
EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")

DEFAULT_COUNTRY_CODE = "+91"


def normalize_phone(phone: str, country_code: str = DEFAULT_COUNTRY_CODE) -> str:
    """Canonicalize a phone number.

    Keeps digits and a leading ``+``. Bare 10-digit numbers get the default
    country code, anything else without ``+`` just gets the ``+`` prefix.
    Returns an empty string when no digits remain.

    Example:
        >>> normalize_phone("9876543210")
        '+919876543210'
        >>> normalize_phone("+1 234-567-8900")
        '+12345678900'
    """
    stripped = phone.strip()
    has_plus = stripped.startswith("+")
    digits = NON_DIGIT_PATTERN.sub("", stripped)

    if not digits:
        return ""
    if has_plus:
        return f"+{digits}"
    if len(digits) == 10:
        return f"{country_code}{digits}"
    return f"+{digits}"


def is_valid_email(email: Optional[str]) -> bool:
    """Check the minimal ``local@domain.tld`` shape."""
    if not email:
        return False
    return EMAIL_PATTERN.match(email) is not None


def mask_phone(phone: Optional[str]) -> Optional[str]:
    """Keep only the last 4 digits for logs."""
    if not phone:
        return None
    return "***" + NON_DIGIT_PATTERN.sub("", phone)[-4:]


def mask_email(email: Optional[str]) -> Optional[str]:
    """Keep only the domain for logs."""
    if not email:
        return None
    _, _, domain = email.rpartition("@")
    return f"***@{domain}" if domain else "***"


def text_to_html(text: str) -> str:
    """Wrap a plaintext body in a minimal HTML document."""
    content = html.escape(text).replace("\n", "<br>")
    return (
        "<!DOCTYPE html>\n"
        "<html>\n"
        "<head>\n"
        "<style>\n"
        "body { font-family: Arial, sans-serif; line-height: 1.6; color: #333; }\n"
        ".container { max-width: 600px; margin: 0 auto; padding: 20px; }\n"
        "</style>\n"
        "</head>\n"
        "<body>\n"
        f'<div class="container">{content}</div>\n'
        "</body>\n"
        "</html>\n"
    )
