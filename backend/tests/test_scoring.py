import pytest

from hintword.game.scoring import score_round


@pytest.mark.parametrize(
    "elapsed, limit, expected",
    [
        (0, 60, 6),
        (10, 60, 5),
        (10.5, 60, 4),
        (55, 60, 1),
        (60, 60, 1),
        (90, 60, 1),
        (0, 300, 30),
    ],
)
def test_score_round(elapsed, limit, expected):
    assert score_round(elapsed, limit) == expected


def test_score_never_increases_with_elapsed_time():
    scores = [score_round(t / 4, 120) for t in range(0, 4 * 130)]
    assert all(a >= b for a, b in zip(scores, scores[1:]))
    assert min(scores) == 1


def test_negative_elapsed_is_treated_as_zero():
    assert score_round(-5, 60) == score_round(0, 60)
