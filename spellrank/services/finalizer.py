#    _____  _____   ______  _       _       _____             _   _  _  __
#   / ____||  __ \ |  ____|| |     | |     |  __ \     /\    | \ | || |/ /
#  | (___  | |__) || |__   | |     | |     | |__) |   /  \   |  \| || ' /
#   \___ \ |  ___/ |  __|  | |     | |     |  _  /   / /\ \  | . ` ||  <
#   ____) || |     | |____ | |____ | |____ | | \ \  / ____ \ | |\  || . \
#  |_____/ |_|     |______||______||______||_|  \_\/_/    \_\|_| \_||_|\_\
#

# Round finalizer - Turns a finished game's rounds into streak, XP and a new rating.

# --------------------------------------------------------------------------
#                                  Functions
# --------------------------------------------------------------------------
# parse_rounds: Builds RoundResult objects from raw dicts, rejecting bad input.
# validate_rounds: Checks round numbers are unique and contiguous from 1.
# longest_streak: Longest run of consecutive correct answers.
# average_word_tier: Mean tier of the words served, rounded half up.
# calculate_xp: XP awarded for a game.
# RoundFinalizer.finalize: Main entry point.
# RoundFinalizer.apply_to_rank: Applies XP and streak to the visible rank.

# --------------------------------------------------------------------------
#                            Variables and others
# --------------------------------------------------------------------------
# RoundFinalizer: Service class.
# round_finalizer: Singleton instance.
# logger: Logger instance.

# --------------------------------------------------------------------------
#                                   imports
# --------------------------------------------------------------------------
# logging: Logging.
# math: Rounding.
# typing: Type hints.
# pydantic: ValidationError for raw round input.
# spellrank.models: Rating, round and rank types.
# spellrank.models.glicko2: Rating engine.

import logging
import math
from typing import Any, Iterable, List, Mapping, Optional, Sequence, Union

from pydantic import ValidationError

from spellrank.constants import DEFAULT_TIER, MAX_TIER, MIN_TIER, XP_PER_CORRECT
from spellrank.exceptions import InvalidInput
from spellrank.models.glicko2 import SkillRatingEngine, skill_rating_engine
from spellrank.models.rating import SkillRating, VisibleRank
from spellrank.models.round import FinalizeResult, GameOutcome, RoundResult

logger = logging.getLogger(__name__)


def parse_rounds(raw_rounds: Iterable[Union[RoundResult, Mapping[str, Any]]]) -> List[RoundResult]:
    """Build rounds from request payloads (camelCase or snake_case keys)"""
    try:
        return [RoundResult.model_validate(raw) for raw in raw_rounds]
    except ValidationError as e:
        raise InvalidInput(f"Malformed round batch: {e.error_count()} error(s)") from e


def validate_rounds(rounds: Sequence[RoundResult]) -> List[RoundResult]:
    """Sort by round number and require exactly 1..n"""
    ordered = sorted(rounds, key=lambda r: r.round_number)
    numbers = [r.round_number for r in ordered]
    if numbers != list(range(1, len(ordered) + 1)):
        raise InvalidInput(f"Round numbers must be contiguous from 1, got {numbers}")
    return ordered


def longest_streak(rounds: Sequence[RoundResult]) -> int:
    """Longest run of consecutive correct answers, in the given order"""
    best = 0
    current = 0
    for r in rounds:
        if r.is_correct:
            current += 1
            best = max(best, current)
        else:
            current = 0
    return best


def average_word_tier(
    rounds: Sequence[RoundResult],
    word_tiers: Optional[Mapping[str, int]] = None,
) -> int:
    """Mean tier of the served words; DEFAULT_TIER when no tier is known"""
    if not word_tiers:
        return DEFAULT_TIER
    tiers = [word_tiers[r.word_id] for r in rounds if r.word_id in word_tiers]
    if not tiers:
        return DEFAULT_TIER
    mean = sum(tiers) / len(tiers)
    return max(MIN_TIER, min(MAX_TIER, math.floor(mean + 0.5)))


def calculate_xp(correct_count: int) -> int:
    """
    XP for one game: flat amount per correct answer.

    Blitz tracks earn the same flat XP with no score multiplier, so XP stays
    monotonic in the correct count on every track.
    """
    return correct_count * XP_PER_CORRECT


class RoundFinalizer:
    """Game-end orchestration: streak, counts, XP and the rating update"""

    def __init__(self, engine: Optional[SkillRatingEngine] = None):
        self.engine = engine if engine is not None else skill_rating_engine

    def finalize(
        self,
        rounds: Sequence[RoundResult],
        prior_rating: SkillRating,
        word_tiers: Optional[Mapping[str, int]] = None,
    ) -> FinalizeResult:
        """
        Finalize a finished game.

        Args:
            rounds: Answered rounds, any order
            prior_rating: Rating loaded for this (user, track)
            word_tiers: word_id -> tier for the words served, if known

        Returns:
            FinalizeResult; an empty game yields zero streak/XP and the prior rating
        """
        ordered = validate_rounds(rounds)

        correct = sum(1 for r in ordered if r.is_correct)
        wrong = len(ordered) - correct
        tier = average_word_tier(ordered, word_tiers)

        new_rating = self.engine.update_skill_rating(
            prior_rating,
            GameOutcome(correct=correct, wrong=wrong, average_word_tier=tier),
        )
        streak = longest_streak(ordered)
        xp = calculate_xp(correct)

        logger.info(
            f"Finalized game for {prior_rating.user_id}/{prior_rating.track.value}: "
            f"{correct} correct, {wrong} wrong, streak={streak}, xp={xp}, "
            f"tier {prior_rating.derived_tier} -> {new_rating.derived_tier}"
        )

        return FinalizeResult(
            longest_streak=streak,
            correct_count=correct,
            wrong_count=wrong,
            new_rating=new_rating,
            xp_delta=xp,
            average_word_tier=tier,
        )

    def apply_to_rank(self, rank: VisibleRank, result: FinalizeResult) -> VisibleRank:
        """Add the game's XP and keep the all-time best streak"""
        return rank.with_progress(result.xp_delta, result.longest_streak)


# Singleton instance
round_finalizer = RoundFinalizer()
