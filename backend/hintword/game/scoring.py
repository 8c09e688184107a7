from __future__ import annotations

import math

MIN_ROUND_SCORE = 1
SECONDS_PER_POINT = 10


def score_round(elapsed_sec: float, time_limit_sec: int) -> int:
    """Score for a correct guess made ``elapsed_sec`` into the round.

    One point per full ten seconds left on the clock, never less than one.
    """
    elapsed = max(0.0, float(elapsed_sec))
    remaining = time_limit_sec - elapsed
    return max(MIN_ROUND_SCORE, math.floor(remaining / SECONDS_PER_POINT))
