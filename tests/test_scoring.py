"""
Tests for set counting and the MatchScores body used by grade/correct.
"""

import pytest
from pydantic import ValidationError

from app.schemas.match import MatchScores, SetSummary
from app.utils.scoring import count_set_points, decide_winner


class TestDecideWinner:
    def test_player1_wins_in_three(self):
        assert decide_winner([(6, 4), (3, 6), (6, 2)]) == 1

    def test_player2_wins_in_three(self):
        assert decide_winner([(4, 6), (6, 3), (2, 6)]) == 2

    def test_single_set(self):
        assert decide_winner([(6, 2)]) == 1
        assert decide_winner([(5, 7)]) == 2

    def test_straight_sets(self):
        assert count_set_points([(6, 1), (7, 5)]) == (2, 0)

    def test_tied_set_rejected(self):
        with pytest.raises(ValueError, match="tie"):
            count_set_points([(6, 6)])

    def test_level_sets_rejected(self):
        with pytest.raises(ValueError, match="level"):
            decide_winner([(6, 4), (4, 6)])


class TestMatchScores:
    def test_sets_skip_missing_pairs(self):
        scores = MatchScores(player1_set1=6, player2_set1=2)
        assert scores.sets == [(6, 2)]

    def test_three_sets(self):
        scores = MatchScores(
            player1_set1=6,
            player2_set1=4,
            player1_set2=3,
            player2_set2=6,
            player1_set3=6,
            player2_set3=2,
        )
        assert scores.sets == [(6, 4), (3, 6), (6, 2)]

    def test_half_a_set_rejected(self):
        with pytest.raises(ValidationError):
            MatchScores(player1_set1=6, player2_set1=2, player1_set2=6)

    def test_set3_without_set2_rejected(self):
        with pytest.raises(ValidationError):
            MatchScores(player1_set1=6, player2_set1=2, player1_set3=6, player2_set3=1)

    def test_tie_rejected(self):
        with pytest.raises(ValidationError):
            MatchScores(player1_set1=5, player2_set1=5)

    def test_out_of_range_rejected(self):
        with pytest.raises(ValidationError):
            MatchScores(player1_set1=8, player2_set1=2)
        with pytest.raises(ValidationError):
            MatchScores(player1_set1=-1, player2_set1=2)

    def test_summary(self):
        summary = SetSummary.from_sets([(6, 4), (3, 6), (6, 2)])
        assert summary.player1_sets == 2
        assert summary.player2_sets == 1
