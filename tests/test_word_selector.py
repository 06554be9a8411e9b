"""
Tests for Word Selector

Unit tests for the tier fallback order, exclusions and the relaxation stages.
"""

import random

import pytest

from spellrank.exceptions import InvalidInput, PoolExhausted
from spellrank.models.word import FallbackStage, Word, WordsByTier
from spellrank.services.word_selector import WordSelector, fallback_order


class StubRandom:
    """Deterministic stand-in for random.Random."""

    def __init__(self, roll=0.99, shift=1):
        self.roll = roll
        self.shift = shift

    def random(self):
        return self.roll

    def choice(self, seq):
        if tuple(seq) == (-1, 1):
            return self.shift
        return seq[0]


def pool_of(*specs):
    """Build a pool from (id, tier) pairs."""
    return WordsByTier.from_words(Word(id=i, word=i, tier=t) for i, t in specs)


class TestFallbackOrder:
    """Tests for fallback_order."""

    def test_middle_tier_alternates_harder_first(self):
        """Tier 4 should fan out harder-then-easier."""
        assert fallback_order(4) == [4, 5, 3, 6, 2, 7, 1]

    def test_lowest_tier_only_goes_up(self):
        assert fallback_order(1) == [1, 2, 3, 4, 5, 6, 7]

    def test_highest_tier_only_goes_down(self):
        assert fallback_order(7) == [7, 6, 5, 4, 3, 2, 1]

    @pytest.mark.parametrize("tier", range(1, 8))
    def test_every_tier_visited_once(self, tier):
        """Each order should be a permutation of 1-7."""
        assert sorted(fallback_order(tier)) == list(range(1, 8))


class TestWordSelector:
    """Tests for WordSelector.select_word."""

    @pytest.fixture
    def selector(self):
        return WordSelector(rng=random.Random(42))

    @pytest.fixture
    def pool(self, words):
        return WordsByTier.from_words(words)

    # =========================================================================
    # Primary Selection
    # =========================================================================

    def test_serves_primary_tier(self, selector, pool):
        """With nothing excluded the word should come from the primary tier."""
        result = selector.select_word(4, pool)

        assert result.tier == 4
        assert result.word.tier == 4
        assert result.stage == FallbackStage.PRIMARY
        assert not result.pool_near_exhaustion

    def test_never_serves_excluded_or_last_word(self, selector, pool):
        """Exclusions and the previous word are skipped while alternatives exist."""
        exclude = {"t4-w0"}
        for _ in range(50):
            result = selector.select_word(4, pool, exclude=exclude, last_word_id="t4-w1")
            assert result.word.id == "t4-w2"

    def test_seeded_selection_is_reproducible(self, pool):
        """Same seed and inputs should pick the same word."""
        first = WordSelector(rng=random.Random(7)).select_word(3, pool)
        second = WordSelector(rng=random.Random(7)).select_word(3, pool)

        assert first.word == second.word

    # =========================================================================
    # Fallback Stages
    # =========================================================================

    def test_falls_back_harder_before_easier(self, selector, pool):
        """Tiers 3-5 used up: tier 6 comes before tier 2."""
        exclude = {f"t{tier}-w{i}" for tier in (3, 4, 5) for i in range(3)}

        result = selector.select_word(4, pool, exclude=exclude)

        assert result.tier == 6
        assert result.stage == FallbackStage.ADJACENT

    def test_falls_back_to_next_tier_in_order(self, selector, pool):
        """Primary tier used up: the next tier is one harder."""
        exclude = {f"t4-w{i}" for i in range(3)}

        result = selector.select_word(4, pool, exclude=exclude)

        assert result.tier == 5

    def test_repeats_history_when_every_tier_is_used(self, selector):
        """With every word excluded a primary-tier repeat is allowed, except the last word."""
        pool = pool_of(("a", 4), ("b", 4), ("c", 2))

        result = selector.select_word(4, pool, exclude={"a", "b", "c"}, last_word_id="b")

        assert result.word.id == "a"
        assert result.stage == FallbackStage.REPEAT_ALLOWED

    def test_absolute_fallback_may_repeat_last_word(self, selector):
        """A one-word pool still yields a word."""
        pool = pool_of(("only", 4))

        result = selector.select_word(4, pool, exclude={"only"}, last_word_id="only")

        assert result.word.id == "only"
        assert result.stage == FallbackStage.ABSOLUTE
        assert result.pool_near_exhaustion

    def test_absolute_fallback_logs_warning(self, selector, caplog):
        """Reaching the last stage should be visible in logs."""
        pool = pool_of(("x", 2))

        with caplog.at_level("WARNING"):
            selector.select_word(5, pool, exclude={"x"})

        assert "near exhaustion" in caplog.text

    def test_empty_pool_raises(self, selector):
        """An empty pool cannot serve anything."""
        with pytest.raises(PoolExhausted):
            selector.select_word(4, WordsByTier())

    @pytest.mark.parametrize("tier", [0, 8, -3])
    def test_invalid_tier_rejected(self, selector, pool, tier):
        with pytest.raises(InvalidInput):
            selector.select_word(tier, pool)

    # =========================================================================
    # Adaptive Mixing
    # =========================================================================

    def test_mixing_off_ignores_rng_roll(self, pool):
        """Without adaptive mixing the primary tier is always used."""
        selector = WordSelector(rng=StubRandom(roll=0.0, shift=1), mixing_probability=1.0)

        result = selector.select_word(4, pool, adaptive_mixing=False)

        assert result.tier == 4

    def test_mixing_shifts_one_tier(self, pool):
        """A winning roll moves the effective tier by one."""
        up = WordSelector(rng=StubRandom(roll=0.0, shift=1), mixing_probability=0.1)
        down = WordSelector(rng=StubRandom(roll=0.0, shift=-1), mixing_probability=0.1)

        assert up.select_word(4, pool, adaptive_mixing=True).tier == 5
        assert down.select_word(4, pool, adaptive_mixing=True).tier == 3

    def test_mixing_roll_above_probability_keeps_tier(self, pool):
        selector = WordSelector(rng=StubRandom(roll=0.5, shift=1), mixing_probability=0.1)

        assert selector.select_word(4, pool, adaptive_mixing=True).tier == 4

    def test_mixing_clamped_at_edges(self, pool):
        """Drifting past tier 7 stays at 7."""
        selector = WordSelector(rng=StubRandom(roll=0.0, shift=1), mixing_probability=0.1)

        result = selector.select_word(7, pool, adaptive_mixing=True)

        assert result.tier == 7
        assert result.stage == FallbackStage.PRIMARY

    def test_mixing_probability_from_settings(self, monkeypatch):
        """The default mixing chance comes from SPELLRANK_ADAPTIVE_MIXING_PROBABILITY."""
        monkeypatch.setenv("SPELLRANK_ADAPTIVE_MIXING_PROBABILITY", "0.25")

        assert WordSelector().mixing_probability == 0.25
