#    _____  _____   ______  _       _       _____             _   _  _  __
#   / ____||  __ \ |  ____|| |     | |     |  __ \     /\    | \ | || |/ /
#  | (___  | |__) || |__   | |     | |     | |__) |   /  \   |  \| || ' /
#   \___ \ |  ___/ |  __|  | |     | |     |  _  /   / /\ \  | . ` ||  <
#   ____) || |     | |____ | |____ | |____ | | \ \  / ____ \ | |\  || . \
#  |_____/ |_|     |______||______||______||_|  \_\/_/    \_\|_| \_||_|\_\
#

# Rating models - Hidden skill ratings, visible XP ranks and tier helpers.

# --------------------------------------------------------------------------
#                                  Functions
# --------------------------------------------------------------------------
# rating_to_tier: Calculates hidden tier (1-7) from a Glicko-2 rating.
# tier_to_rating: Opponent rating anchor used for a word tier.
# get_tier_for_xp: Calculates visible rank tier from total XP.
# tier_progress: Progress towards the next visible rank tier.

# --------------------------------------------------------------------------
#                            Variables and others
# --------------------------------------------------------------------------
# InputMode: Enum for voice or keyboard answers.
# RankTrack: Enum for mode + input method tracks.
# RankTier: Enum for visible XP tiers (new_bee ... bee_keeper).
# SkillRating: Hidden Glicko-2 state for one (user, track).
# VisibleRank: XP-based rank shown to players for one (user, track).
# TierProgress: Result of tier_progress.

# --------------------------------------------------------------------------
#                                   imports
# --------------------------------------------------------------------------
# pydantic: Data validation.
# dataclasses: Data structures.
# enum: Enumerations.
# typing: Type hints.
# spellrank.constants: Tier ranges, XP thresholds and cold start values.

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from spellrank.constants import (
    DEFAULT_TIER,
    INITIAL_RATING,
    INITIAL_RD,
    INITIAL_VOLATILITY,
    MAX_RD,
    MAX_TIER,
    MAX_VOLATILITY,
    MIN_RD,
    MIN_TIER,
    MIN_VOLATILITY,
    RATING_CEILING,
    TIER_RATING_RANGES,
    XP_THRESHOLDS,
)


class InputMode(str, Enum):
    VOICE = "voice"
    KEYBOARD = "keyboard"


class RankTrack(str, Enum):
    """Each game mode + input method pair is ranked separately"""
    ENDLESS_VOICE = "endless_voice"
    ENDLESS_KEYBOARD = "endless_keyboard"
    BLITZ_VOICE = "blitz_voice"
    BLITZ_KEYBOARD = "blitz_keyboard"

    @property
    def input_mode(self) -> InputMode:
        return InputMode.VOICE if self.value.endswith("_voice") else InputMode.KEYBOARD


class RankTier(str, Enum):
    """Visible rank tiers, ordered lowest to highest"""
    NEW_BEE = "new_bee"
    BUMBLE_BEE = "bumble_bee"
    BUSY_BEE = "busy_bee"
    HONEY_BEE = "honey_bee"
    WORKER_BEE = "worker_bee"
    ROYAL_BEE = "royal_bee"
    BEE_KEEPER = "bee_keeper"


TIER_ORDER = list(RankTier)


def rating_to_tier(rating: float) -> int:
    """Determine hidden tier based on Glicko-2 rating"""
    for tier in range(MAX_TIER, MIN_TIER - 1, -1):
        if rating >= TIER_RATING_RANGES[tier][0]:
            return tier
    return MIN_TIER


def tier_to_rating(tier: int) -> float:
    """Midpoint of a tier's rating range, top range capped at the rating ceiling"""
    low, high = TIER_RATING_RANGES[tier]
    return (low + min(high, RATING_CEILING)) / 2


def get_tier_for_xp(xp: int) -> RankTier:
    """Determine visible rank tier based on total XP"""
    for tier in reversed(TIER_ORDER):
        if xp >= XP_THRESHOLDS[tier.value]:
            return tier
    return RankTier.NEW_BEE


@dataclass(frozen=True)
class TierProgress:
    """Progress towards the next visible tier"""
    tier: RankTier
    next_tier: Optional[RankTier]
    progress: int  # percent, 0-100
    xp_to_next: int


def tier_progress(xp: int) -> TierProgress:
    """Get progress to next tier"""
    tier = get_tier_for_xp(xp)
    index = TIER_ORDER.index(tier)

    if index == len(TIER_ORDER) - 1:
        return TierProgress(tier=tier, next_tier=None, progress=100, xp_to_next=0)

    next_tier = TIER_ORDER[index + 1]
    current_threshold = XP_THRESHOLDS[tier.value]
    next_threshold = XP_THRESHOLDS[next_tier.value]
    progress = (xp - current_threshold) * 100 // (next_threshold - current_threshold)

    return TierProgress(
        tier=tier,
        next_tier=next_tier,
        progress=progress,
        xp_to_next=next_threshold - xp,
    )


class SkillRating(BaseModel):
    """Hidden Glicko-2 rating for one user on one track"""
    model_config = ConfigDict(frozen=True, use_enum_values=False)

    user_id: str
    track: RankTrack
    rating: float = INITIAL_RATING
    rating_deviation: float = Field(default=INITIAL_RD, ge=MIN_RD, le=MAX_RD)
    volatility: float = Field(default=INITIAL_VOLATILITY, ge=MIN_VOLATILITY, le=MAX_VOLATILITY)
    derived_tier: int = Field(default=DEFAULT_TIER, ge=MIN_TIER, le=MAX_TIER)
    games_played: int = Field(default=0, ge=0)
    season_highest_rating: float = INITIAL_RATING
    version: int = Field(default=0, ge=0)  # Bumped on every saved update

    @classmethod
    def default(cls, user_id: str, track: RankTrack) -> 'SkillRating':
        """Cold start rating for a user who has never played this track"""
        return cls(user_id=user_id, track=track)


class VisibleRank(BaseModel):
    """XP rank shown to the player (independent of the hidden tier)"""
    model_config = ConfigDict(frozen=True)

    user_id: str
    track: RankTrack
    tier: RankTier = RankTier.NEW_BEE
    xp: int = Field(default=0, ge=0)
    best_streak: int = Field(default=0, ge=0)
    version: int = Field(default=0, ge=0)

    @classmethod
    def default(cls, user_id: str, track: RankTrack) -> 'VisibleRank':
        return cls(user_id=user_id, track=track)

    def with_progress(self, xp_delta: int, streak: int) -> 'VisibleRank':
        """Add XP (re-tiering as needed) and keep the best streak seen"""
        xp = self.xp + xp_delta
        return self.model_copy(update={
            "xp": xp,
            "tier": get_tier_for_xp(xp),
            "best_streak": max(self.best_streak, streak),
        })
