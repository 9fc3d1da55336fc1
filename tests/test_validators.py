from __future__ import annotations

import pytest

from fresq.core.validators import (
    PALETTE_SIZE,
    is_valid_color,
    is_valid_palette,
    is_within_grid,
    normalize_email,
)


@pytest.mark.parametrize(
    ("x", "y", "expected"),
    [
        (0, 0, True),
        (199, 199, True),
        (200, 0, False),
        (0, 200, False),
        (-1, 5, False),
    ],
)
def test_is_within_grid_uses_half_open_bounds(x: int, y: int, expected: bool) -> None:
    assert is_within_grid(x, y, width=200, height=200) is expected


def test_is_valid_color_accepts_only_palette_indexes() -> None:
    assert is_valid_color(1) is True
    assert is_valid_color(10) is True
    assert is_valid_color(0) is False
    assert is_valid_color(11) is False
    assert is_valid_color(True) is False


def test_normalize_email_lowercases_and_rejects_garbage() -> None:
    assert normalize_email("  Buyer@Example.COM ") == "buyer@example.com"
    assert normalize_email("not-an-email") is None
    assert normalize_email("") is None
    assert normalize_email(None) is None


def test_is_valid_palette_requires_ten_hex_colors() -> None:
    palette = ["#A0B1C2"] * PALETTE_SIZE
    assert is_valid_palette(palette) is True
    assert is_valid_palette(palette[:-1]) is False
    assert is_valid_palette(palette[:-1] + ["red"]) is False


def test_is_valid_palette_rejects_colors_with_trailing_newline() -> None:
    palette = ["#AABBCC\n"] + ["#000000"] * (PALETTE_SIZE - 1)

    assert is_valid_palette(palette) is False
    assert is_valid_palette([" #AABBCC"] + palette[1:]) is False
