from __future__ import annotations

import secrets
import string
from datetime import datetime

from fresq.core.validators import normalize_email
from fresq.economy.tickets.errors import InvalidEmailError

ORDER_SUFFIX_ALPHABET = string.digits + string.ascii_uppercase
ORDER_SUFFIX_LENGTH = 9


def _build_order_id(*, now_utc: datetime) -> str:
    epoch_ms = int(now_utc.timestamp() * 1000)
    suffix = "".join(secrets.choice(ORDER_SUFFIX_ALPHABET) for _ in range(ORDER_SUFFIX_LENGTH))
    return f"ORDER-{epoch_ms}-{suffix}"


def _require_email(raw: str | None) -> str:
    email = normalize_email(raw or "")
    if email is None:
        raise InvalidEmailError
    return email
