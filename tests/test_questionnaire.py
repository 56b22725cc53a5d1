"""Tests for QuickDASH / DASH scoring."""

import pytest

from rom_engine.evaluation.questionnaire import (
    DASH,
    QUICKDASH_ITEMS,
    disability_score,
    quickdash_score,
)


class TestQuickDash:
    def test_no_difficulty(self):
        assert quickdash_score([1] * 11) == 0.0

    def test_unable(self):
        assert quickdash_score([5] * 11) == 100.0

    def test_mixed(self):
        # (sum - n) * 25 / n
        assert quickdash_score([3] * 11) == pytest.approx(50.0)
        assert quickdash_score([1, 2, 3, 4, 5, 1, 2, 3, 4, 3, 1]) == pytest.approx(40.9)

    def test_one_missing_allowed(self):
        assert quickdash_score([2] * 10 + [None]) == pytest.approx(25.0)
        assert quickdash_score([2] * 10) == pytest.approx(25.0)

    def test_two_missing_is_unscored(self):
        assert quickdash_score([2] * 9 + [None, None]) is None

    def test_mapping_responses(self):
        responses = {item: 1 for item in QUICKDASH_ITEMS}
        assert quickdash_score(responses) == 0.0

    def test_out_of_range_answer(self):
        with pytest.raises(ValueError):
            quickdash_score([0] + [1] * 10)
        with pytest.raises(ValueError):
            quickdash_score([6] * 11)

    def test_too_many_answers(self):
        with pytest.raises(ValueError):
            quickdash_score([1] * 12)


class TestDash:
    def test_three_missing_allowed(self):
        assert disability_score([3] * 27 + [None] * 3, DASH) == pytest.approx(50.0)

    def test_four_missing_is_unscored(self):
        assert disability_score([3] * 26, DASH) is None
