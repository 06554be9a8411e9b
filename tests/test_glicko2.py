"""
Tests for the Glicko-2 Skill Rating Engine

Unit tests for rating updates, clamping, cold start and tier mapping.
"""

import logging

import pytest

from spellrank.exceptions import InvalidInput
from spellrank.models.glicko2 import SkillRatingEngine, from_glicko2_scale, to_glicko2_scale
from spellrank.models.rating import RankTrack, SkillRating, rating_to_tier, tier_to_rating
from spellrank.models.round import GameOutcome


class TestSkillRatingEngine:
    """Tests for SkillRatingEngine.update_skill_rating."""

    @pytest.fixture
    def engine(self):
        return SkillRatingEngine()

    # =========================================================================
    # Direction and Monotonicity
    # =========================================================================

    def test_all_correct_raises_rating(self, engine, seasoned_rating):
        """A perfect game at the player's tier should raise the rating."""
        result = engine.update_skill_rating(seasoned_rating, GameOutcome(correct=10, wrong=0))

        assert result.rating > seasoned_rating.rating

    def test_all_wrong_lowers_rating(self, engine, seasoned_rating):
        """A game with no correct answers should lower the rating."""
        result = engine.update_skill_rating(seasoned_rating, GameOutcome(correct=0, wrong=10))

        assert result.rating < seasoned_rating.rating

    def test_more_correct_never_rates_lower(self, engine, seasoned_rating):
        """With the same total, each extra correct answer should rate higher."""
        ratings = [
            engine.update_skill_rating(
                seasoned_rating, GameOutcome(correct=c, wrong=10 - c)
            ).rating
            for c in range(11)
        ]

        assert all(a < b for a, b in zip(ratings, ratings[1:]))

    def test_harder_words_reward_more(self, engine, seasoned_rating):
        """The same score against harder words should be worth more."""
        easy = engine.update_skill_rating(
            seasoned_rating, GameOutcome(correct=6, wrong=4, average_word_tier=2)
        )
        hard = engine.update_skill_rating(
            seasoned_rating, GameOutcome(correct=6, wrong=4, average_word_tier=6)
        )

        assert hard.rating > easy.rating

    def test_rating_change_helper(self, engine, seasoned_rating):
        """rating_change should report the signed difference."""
        result = engine.update_skill_rating(seasoned_rating, GameOutcome(correct=0, wrong=5))

        assert SkillRatingEngine.rating_change(seasoned_rating, result) == pytest.approx(
            result.rating - seasoned_rating.rating
        )
        assert SkillRatingEngine.rating_change(seasoned_rating, result) < 0

    # =========================================================================
    # Bounds
    # =========================================================================

    def test_bounds_hold_on_long_winning_run(self, engine, fresh_rating):
        """Rating, RD and volatility should stay clamped through many perfect games."""
        rating = fresh_rating
        for _ in range(100):
            rating = engine.update_skill_rating(
                rating, GameOutcome(correct=20, wrong=0, average_word_tier=7)
            )
            assert 1000.0 <= rating.rating <= 2000.0
            assert 30.0 <= rating.rating_deviation <= 350.0
            assert 0.03 <= rating.volatility <= 0.10

        assert rating.derived_tier == 7

    def test_bounds_hold_on_long_losing_run(self, engine, fresh_rating):
        """Rating should never fall below the floor."""
        rating = fresh_rating
        for _ in range(100):
            rating = engine.update_skill_rating(
                rating, GameOutcome(correct=0, wrong=20, average_word_tier=1)
            )
            assert 1000.0 <= rating.rating <= 2000.0
            assert 30.0 <= rating.rating_deviation <= 350.0
            assert 0.03 <= rating.volatility <= 0.10

        assert rating.derived_tier == 1

    def test_rd_shrinks_with_play(self, engine, fresh_rating):
        """Playing should make the rating more certain."""
        result = engine.update_skill_rating(fresh_rating, GameOutcome(correct=5, wrong=5))

        assert result.rating_deviation < fresh_rating.rating_deviation

    def test_custom_rating_window(self, seasoned_rating):
        """Configured floor and ceiling should be honoured."""
        engine = SkillRatingEngine(rating_floor=1400.0, rating_ceiling=1600.0)

        up = engine.update_skill_rating(seasoned_rating, GameOutcome(correct=30, wrong=0, average_word_tier=7))
        down = engine.update_skill_rating(seasoned_rating, GameOutcome(correct=0, wrong=30, average_word_tier=1))

        assert up.rating == 1600.0
        assert down.rating == 1400.0

    # =========================================================================
    # Cold Start and Bookkeeping
    # =========================================================================

    def test_cold_start_ignores_stored_values(self, engine, fresh_rating):
        """A never-played row should update from defaults, whatever it holds."""
        junk = SkillRating(
            user_id="user-1",
            track=RankTrack.ENDLESS_VOICE,
            rating=1900.0,
            rating_deviation=40.0,
            volatility=0.09,
            derived_tier=7,
            games_played=0,
        )
        outcome = GameOutcome(correct=7, wrong=3, average_word_tier=5)

        from_junk = engine.update_skill_rating(junk, outcome)
        from_default = engine.update_skill_rating(fresh_rating, outcome)

        assert from_junk.rating == from_default.rating
        assert from_junk.rating_deviation == from_default.rating_deviation
        assert from_junk.volatility == from_default.volatility
        assert from_junk.derived_tier == from_default.derived_tier

    def test_games_played_increments(self, engine, seasoned_rating):
        """Each applied game should count once."""
        result = engine.update_skill_rating(seasoned_rating, GameOutcome(correct=3, wrong=2))

        assert result.games_played == seasoned_rating.games_played + 1

    def test_season_high_tracks_peak(self, engine, seasoned_rating):
        """Season high should keep the best rating seen."""
        up = engine.update_skill_rating(seasoned_rating, GameOutcome(correct=10, wrong=0))
        down = engine.update_skill_rating(up, GameOutcome(correct=0, wrong=10))

        assert up.season_highest_rating == up.rating
        assert down.season_highest_rating == up.rating

    def test_version_is_left_to_the_store(self, engine, seasoned_rating):
        """The engine should not touch the persistence version."""
        stored = seasoned_rating.model_copy(update={"version": 7})

        result = engine.update_skill_rating(stored, GameOutcome(correct=4, wrong=1))

        assert result.version == 7

    def test_input_is_not_mutated(self, engine, seasoned_rating):
        """The rating passed in should be left as it was."""
        before = seasoned_rating.model_dump()

        engine.update_skill_rating(seasoned_rating, GameOutcome(correct=4, wrong=1))

        assert seasoned_rating.model_dump() == before

    # =========================================================================
    # Edge Cases and Errors
    # =========================================================================

    def test_empty_game_is_a_no_op(self, engine, seasoned_rating):
        """No answered rounds should leave the rating untouched."""
        result = engine.update_skill_rating(seasoned_rating, GameOutcome(correct=0, wrong=0))

        assert result is seasoned_rating

    def test_negative_counts_rejected(self, engine, seasoned_rating):
        """Negative round counts are invalid."""
        with pytest.raises(InvalidInput):
            engine.update_skill_rating(seasoned_rating, GameOutcome(correct=-1, wrong=3))

    @pytest.mark.parametrize("tier", [0, 8])
    def test_tier_out_of_range_rejected(self, engine, seasoned_rating, tier):
        """Average word tier must be 1-7."""
        with pytest.raises(InvalidInput):
            engine.update_skill_rating(
                seasoned_rating, GameOutcome(correct=1, wrong=1, average_word_tier=tier)
            )

    def test_convergence_failure_keeps_volatility(self, seasoned_rating, caplog):
        """When the volatility solve runs out of iterations the old value is kept."""
        engine = SkillRatingEngine(max_iterations=0)
        start = seasoned_rating.model_copy(update={"volatility": 0.07})

        with caplog.at_level(logging.WARNING):
            result = engine.update_skill_rating(start, GameOutcome(correct=8, wrong=2))

        assert result.volatility == 0.07
        assert result.rating > start.rating
        assert "did not converge" in caplog.text

    def test_result_survives_json_round_trip(self, engine, seasoned_rating):
        """Persisted floats should come back bit-identical."""
        result = engine.update_skill_rating(seasoned_rating, GameOutcome(correct=6, wrong=3))

        restored = SkillRating.model_validate_json(result.model_dump_json())

        assert restored == result
        assert restored.rating == result.rating
        assert restored.volatility == result.volatility


class TestTierMapping:
    """Tests for rating <-> tier helpers."""

    @pytest.mark.parametrize("rating,tier", [
        (999.0, 1),
        (1000.0, 1),
        (1149.9, 1),
        (1150.0, 2),
        (1449.9, 3),
        (1500.0, 4),
        (1600.0, 5),
        (1899.9, 6),
        (1900.0, 7),
        (2000.0, 7),
    ])
    def test_rating_to_tier(self, rating, tier):
        """Ratings should map to the tier whose range contains them."""
        assert rating_to_tier(rating) == tier

    def test_tier_anchors_are_range_midpoints(self):
        """Synthetic opponents sit mid-range, top tier capped at the ceiling."""
        assert tier_to_rating(1) == 1074.5
        assert tier_to_rating(4) == 1524.5
        assert tier_to_rating(7) == 1950.0

    def test_anchor_maps_back_to_its_tier(self):
        """Every anchor should fall inside its own tier."""
        for tier in range(1, 8):
            assert rating_to_tier(tier_to_rating(tier)) == tier

    def test_scale_conversion_round_trip(self):
        """Display <-> Glicko-2 scale conversion should be reversible."""
        mu, phi = to_glicko2_scale(1723.4, 87.0)
        rating, rd = from_glicko2_scale(mu, phi)

        assert rating == pytest.approx(1723.4)
        assert rd == pytest.approx(87.0)
