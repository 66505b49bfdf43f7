"""Unit tests for slot scoring."""
import pytest

from meetpoll.services.scoring import score


@pytest.mark.unit
class TestScore:
    """Test the 0-100 desirability score."""

    def test_no_responses_scores_zero(self):
        """A slot nobody has answered for scores 0."""
        assert score(0, 0) == 0

    def test_everyone_available_scores_hundred(self):
        for total in (1, 2, 3, 7, 50):
            assert score(total, total) == 100

    def test_nobody_available_scores_zero(self):
        for total in (1, 2, 3, 7, 50):
            assert score(0, total) == 0

    def test_half_available(self):
        """One of two participants available scores 50."""
        assert score(1, 2) == 50

    @pytest.mark.parametrize(
        "available,total,expected",
        [
            (1, 3, 33),
            (2, 3, 67),
            (1, 8, 13),  # 12.5 rounds half up
            (3, 8, 38),  # 37.5 rounds half up
            (5, 6, 83),
        ],
    )
    def test_rounding(self, available, total, expected):
        assert score(available, total) == expected

    def test_score_is_always_in_range(self):
        for total in range(1, 30):
            for available in range(total + 1):
                assert 0 <= score(available, total) <= 100

    def test_negative_counts_rejected(self):
        with pytest.raises(ValueError):
            score(-1, 3)
        with pytest.raises(ValueError):
            score(1, -3)
