from __future__ import annotations

import pytest

from fresq.grid.service import center_offset, progress_percent


@pytest.mark.parametrize(
    ("old", "new", "expected"),
    [
        ((100, 100), (200, 200), (50, 50)),
        ((200, 200), (300, 300), (50, 50)),
        ((300, 300), (500, 500), (100, 100)),
        ((200, 200), (301, 301), (50, 50)),
        ((200, 100), (300, 300), (50, 100)),
        ((200, 200), (200, 200), (0, 0)),
    ],
)
def test_center_offset_floors_half_the_growth(
    old: tuple[int, int],
    new: tuple[int, int],
    expected: tuple[int, int],
) -> None:
    assert (
        center_offset(old_width=old[0], old_height=old[1], new_width=new[0], new_height=new[1])
        == expected
    )


def test_progress_percent_is_capped_and_rounded() -> None:
    assert progress_percent(tickets_sold=500, next_tier_min_tickets=1000) == 50.0
    assert progress_percent(tickets_sold=1, next_tier_min_tickets=3) == 33.33
    assert progress_percent(tickets_sold=1500, next_tier_min_tickets=1000) == 100.0
    assert progress_percent(tickets_sold=0, next_tier_min_tickets=0) == 100.0
