"""Input sanitization for free-text fields (claims, posts, comments, profiles)."""

import re

# Maximum lengths for text fields (characters)
MAX_DESCRIPTION = 5000
MAX_POST_TITLE = 200
MAX_POST_CONTENT = 10000
MAX_COMMENT = 2000
MAX_FULL_NAME = 128
MAX_CAR_NUMBER = 32
MAX_PHONE_NUMBER = 32
MAX_URL = 2048

_CONTROL_CHARS = re.compile(r"[\x00-\x08\x0b\x0c\x0e-\x1f\x7f]")


def sanitize_text(text: str | None, max_length: int) -> str:
    """Strip control characters and surrounding whitespace, truncate to max_length."""
    if text is None or not isinstance(text, str):
        return ""
    # Remove control characters (0x00-0x1F except tab/newline/carriage return)
    cleaned = _CONTROL_CHARS.sub("", text).strip()
    if len(cleaned) > max_length:
        cleaned = cleaned[:max_length]
    return cleaned


def car_number_slug(car_number: str) -> str:
    """Lowercase a car number and keep only ASCII letters and digits.

    "1234 ABC" -> "1234abc". Used as the local part of the synthetic email.
    """
    return re.sub(r"[^a-z0-9]", "", (car_number or "").strip().lower())
