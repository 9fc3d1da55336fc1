from __future__ import annotations

import re

COLOR_MIN = 1
COLOR_MAX = 10
PALETTE_SIZE = COLOR_MAX - COLOR_MIN + 1
EMAIL_MAX_LENGTH = 254

EMAIL_RE = re.compile(
    r"^[a-z0-9!#$%&'*+/=?^_`{|}~-]+(?:\.[a-z0-9!#$%&'*+/=?^_`{|}~-]+)*"
    r"@(?:[a-z0-9](?:[a-z0-9-]*[a-z0-9])?\.)+[a-z0-9](?:[a-z0-9-]*[a-z0-9])?$"
)
PALETTE_COLOR_RE = re.compile(r"#[0-9A-Fa-f]{6}")


def is_within_grid(x: int, y: int, *, width: int, height: int) -> bool:
    return 0 <= x < width and 0 <= y < height


def is_valid_color(color: int) -> bool:
    return isinstance(color, int) and not isinstance(color, bool) and COLOR_MIN <= color <= COLOR_MAX


def normalize_email(raw_email: str | None) -> str | None:
    """Returns the lower-cased email, or None when it is not a plausible address."""
    if not raw_email or not isinstance(raw_email, str):
        return None
    email = raw_email.strip().lower()
    if not email or len(email) > EMAIL_MAX_LENGTH:
        return None
    if EMAIL_RE.match(email) is None:
        return None
    return email


def is_valid_palette(palette: list[str]) -> bool:
    if len(palette) != PALETTE_SIZE:
        return False
    return all(isinstance(color, str) and PALETTE_COLOR_RE.fullmatch(color) for color in palette)
