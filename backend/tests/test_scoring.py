import pytest

from trivia.services.games.scoring import elapsed_seconds, points_for


@pytest.mark.parametrize('elapsed, expected', [
    (0, 10), (4, 10),
    (5, 8), (9, 8),
    (10, 6), (14, 6),
    (15, 4), (19, 4),
    (20, 2), (29, 2),
    (30, 0), (31, 0), (600, 0),
])
def test_points_tiers(elapsed, expected):
    assert points_for(elapsed) == expected


def test_points_never_increase_with_time():
    values = [points_for(t) for t in range(0, 120)]
    assert all(a >= b for a, b in zip(values, values[1:]))
    assert set(values) == {0, 2, 4, 6, 8, 10}


def test_elapsed_seconds_truncates_and_clamps():
    assert elapsed_seconds(1000, 4999) == 3
    assert elapsed_seconds(1000, 6000) == 5
    # Clock skew never yields negative time
    assert elapsed_seconds(5000, 1000) == 0
