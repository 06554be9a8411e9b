"""
Tests for Round Finalizer

Unit tests for round validation, streaks, XP and visible rank progress.
"""

import pytest

from spellrank.exceptions import InvalidInput
from spellrank.models.rating import RankTier, RankTrack, VisibleRank, get_tier_for_xp, tier_progress
from spellrank.models.round import RoundResult
from spellrank.services.finalizer import (
    RoundFinalizer,
    average_word_tier,
    calculate_xp,
    longest_streak,
    parse_rounds,
    validate_rounds,
)


def make_rounds(pattern, start=1):
    return [
        RoundResult(
            round_number=start + i,
            word_id=f"w{start + i}",
            answer="x",
            is_correct=correct,
            time_taken_seconds=2.5,
        )
        for i, correct in enumerate(pattern)
    ]


class TestRoundHelpers:
    """Tests for the module-level helpers."""

    @pytest.mark.parametrize("pattern,expected", [
        ([True, True, False, True, True, True], 3),
        ([], 0),
        ([False, False, False], 0),
        ([True], 1),
        ([True, False, True, False], 1),
    ])
    def test_longest_streak(self, pattern, expected):
        assert longest_streak(make_rounds(pattern)) == expected

    def test_validate_sorts_by_round_number(self):
        """Rounds may arrive in any order."""
        rounds = make_rounds([True, False, True])

        ordered = validate_rounds(list(reversed(rounds)))

        assert [r.round_number for r in ordered] == [1, 2, 3]

    def test_validate_rejects_gaps(self):
        rounds = make_rounds([True]) + make_rounds([True], start=3)

        with pytest.raises(InvalidInput):
            validate_rounds(rounds)

    def test_validate_rejects_duplicates(self):
        rounds = make_rounds([True, True]) + make_rounds([False], start=2)

        with pytest.raises(InvalidInput):
            validate_rounds(rounds)

    def test_validate_rejects_not_starting_at_one(self):
        with pytest.raises(InvalidInput):
            validate_rounds(make_rounds([True, True], start=2))

    def test_parse_camel_case_rounds(self):
        """Gameplay payloads use camelCase keys."""
        rounds = parse_rounds([
            {"roundNumber": 1, "wordId": "w1", "answer": "cat", "isCorrect": True, "timeTakenSeconds": 3.1},
        ])

        assert rounds[0].word_id == "w1"
        assert rounds[0].is_correct is True

    def test_parse_rejects_malformed_rounds(self):
        """Missing fields and bad values become InvalidInput."""
        with pytest.raises(InvalidInput):
            parse_rounds([{"roundNumber": 0, "wordId": "w1", "answer": "", "isCorrect": True}])

    def test_average_tier_unknown_defaults_to_four(self):
        assert average_word_tier(make_rounds([True, False])) == 4

    def test_average_tier_rounds_half_up(self):
        """Tiers 2 and 3 average 2.5, which rounds to 3."""
        rounds = make_rounds([True, False])

        assert average_word_tier(rounds, {"w1": 2, "w2": 3}) == 3

    def test_average_tier_ignores_unknown_words(self):
        rounds = make_rounds([True, False, True])

        assert average_word_tier(rounds, {"w1": 6, "w3": 6}) == 6

    def test_xp_is_five_per_correct(self):
        assert calculate_xp(0) == 0
        assert calculate_xp(7) == 35


class TestRoundFinalizer:
    """Tests for RoundFinalizer."""

    @pytest.fixture
    def finalizer(self):
        return RoundFinalizer()

    def test_finalize_counts_and_streak(self, finalizer, seasoned_rating):
        result = finalizer.finalize(make_rounds([True, True, False, True, True, True]), seasoned_rating)

        assert result.correct_count == 5
        assert result.wrong_count == 1
        assert result.longest_streak == 3
        assert result.xp_delta == 25
        assert result.new_rating.rating > seasoned_rating.rating

    def test_finalize_order_independent(self, finalizer, seasoned_rating):
        """Shuffled input gives the same result as ordered input."""
        rounds = make_rounds([True, False, True, True, False, True, True])
        shuffled = rounds[3:] + rounds[:3]

        assert finalizer.finalize(shuffled, seasoned_rating) == finalizer.finalize(rounds, seasoned_rating)

    def test_finalize_empty_game(self, finalizer, seasoned_rating):
        """No rounds: nothing earned, rating untouched."""
        result = finalizer.finalize([], seasoned_rating)

        assert result.longest_streak == 0
        assert result.xp_delta == 0
        assert result.new_rating is seasoned_rating

    def test_finalize_uses_word_tiers(self, finalizer, seasoned_rating):
        """Known word tiers feed the synthetic opponent."""
        rounds = make_rounds([True, True, False])
        hard = finalizer.finalize(rounds, seasoned_rating, {"w1": 7, "w2": 7, "w3": 7})
        easy = finalizer.finalize(rounds, seasoned_rating, {"w1": 1, "w2": 1, "w3": 1})

        assert hard.average_word_tier == 7
        assert easy.average_word_tier == 1
        assert hard.new_rating.rating > easy.new_rating.rating

    def test_finalize_rejects_bad_batch(self, finalizer, seasoned_rating):
        with pytest.raises(InvalidInput):
            finalizer.finalize(make_rounds([True], start=2), seasoned_rating)

    def test_apply_to_rank(self, finalizer, seasoned_rating):
        """XP accumulates, tier follows XP, best streak is kept."""
        rank = VisibleRank(user_id="user-1", track=RankTrack.ENDLESS_VOICE, xp=90, best_streak=8)
        result = finalizer.finalize(make_rounds([True, True, True, False]), seasoned_rating)

        updated = finalizer.apply_to_rank(rank, result)

        assert updated.xp == 105
        assert updated.tier == RankTier.BUMBLE_BEE
        assert updated.best_streak == 8

    def test_apply_to_rank_new_best_streak(self, finalizer, seasoned_rating):
        rank = VisibleRank.default("user-1", RankTrack.BLITZ_KEYBOARD)
        result = finalizer.finalize(make_rounds([True] * 4), seasoned_rating)

        assert finalizer.apply_to_rank(rank, result).best_streak == 4

    def test_blitz_xp_is_flat_per_correct(self, finalizer, seasoned_rating):
        """Blitz games earn 5 XP per correct answer; more correct never earns less."""
        blitz = seasoned_rating.model_copy(update={"track": RankTrack.BLITZ_VOICE})

        xp = [finalizer.finalize(make_rounds([True] * n + [False] * (6 - n)), blitz).xp_delta for n in range(7)]

        assert xp == [0, 5, 10, 15, 20, 25, 30]


class TestVisibleTiers:
    """Tests for XP -> visible tier mapping."""

    @pytest.mark.parametrize("xp,tier", [
        (0, RankTier.NEW_BEE),
        (99, RankTier.NEW_BEE),
        (100, RankTier.BUMBLE_BEE),
        (599, RankTier.BUSY_BEE),
        (1000, RankTier.WORKER_BEE),
        (2100, RankTier.BEE_KEEPER),
        (99999, RankTier.BEE_KEEPER),
    ])
    def test_get_tier_for_xp(self, xp, tier):
        assert get_tier_for_xp(xp) == tier

    def test_progress_midway(self):
        progress = tier_progress(200)

        assert progress.tier == RankTier.BUMBLE_BEE
        assert progress.next_tier == RankTier.BUSY_BEE
        assert progress.progress == 50
        assert progress.xp_to_next == 100

    def test_progress_at_top_tier(self):
        progress = tier_progress(5000)

        assert progress.next_tier is None
        assert progress.progress == 100
