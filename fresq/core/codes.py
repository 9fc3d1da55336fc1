from __future__ import annotations

import secrets

ALPHABET = "ABCDEFGHJKLMNPQRSTUVWXYZ23456789"
CODE_LENGTH = 8


def generate_code(length: int = CODE_LENGTH) -> str:
    """Generates an uppercase access code without visually confusable characters."""
    if length <= 0:
        raise ValueError("length must be positive")
    return "".join(secrets.choice(ALPHABET) for _ in range(length))


def normalize_code(raw_code: str | None) -> str:
    return (raw_code or "").strip().upper()


def is_well_formed_code(code: str) -> bool:
    return len(code) == CODE_LENGTH and all(char in ALPHABET for char in code)
