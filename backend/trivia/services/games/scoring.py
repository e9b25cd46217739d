from typing import Tuple

# (answered within N seconds, points), fastest tier first
SPEED_TIERS: Tuple[Tuple[int, int], ...] = (
    (5, 10),
    (10, 8),
    (15, 6),
    (20, 4),
    (30, 2),
)


def points_for(elapsed_seconds: int) -> int:
    """Points for a correct answer given ``elapsed_seconds`` since round start.

    Faster answers earn more: under 5s is 10 points, down to 2 points under
    30s. Anything at or past 30s earns nothing.
    """
    elapsed = max(0, int(elapsed_seconds))
    for limit, points in SPEED_TIERS:
        if elapsed < limit:
            return points
    return 0


def elapsed_seconds(start_ms: int, now_ms: int) -> int:
    """Whole seconds between two millisecond timestamps, never negative."""
    return max(0, (now_ms - start_ms) // 1000)
