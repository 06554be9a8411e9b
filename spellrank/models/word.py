#    _____  _____   ______  _       _       _____             _   _  _  __
#   / ____||  __ \ |  ____|| |     | |     |  __ \     /\    | \ | || |/ /
#  | (___  | |__) || |__   | |     | |     | |__) |   /  \   |  \| || ' /
#   \___ \ |  ___/ |  __|  | |     | |     |  _  /   / /\ \  | . ` ||  <
#   ____) || |     | |____ | |____ | |____ | | \ \  / ____ \ | |\  || . \
#  |_____/ |_|     |______||______||______||_|  \_\/_/    \_\|_| \_||_|\_\
#

# Word models - Reference words grouped by difficulty tier and selection results.

# --------------------------------------------------------------------------
#                                  Functions
# --------------------------------------------------------------------------
# WordsByTier.from_words: Groups a flat word list by tier.
# WordsByTier.in_tier: Returns the words of a single tier.
# WordsByTier.all_words: Returns every word in the pool.

# --------------------------------------------------------------------------
#                            Variables and others
# --------------------------------------------------------------------------
# Word: Immutable reference word.
# WordsByTier: Word pool keyed by tier.
# FallbackStage: Enum describing how far selection had to fall back.
# SelectionResult: Word picked by the selector plus the stage that produced it.

# --------------------------------------------------------------------------
#                                   imports
# --------------------------------------------------------------------------
# pydantic: Data validation.
# dataclasses: Data structures.
# enum: Enumerations.
# typing: Type hints.

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Iterable, List, Optional

from pydantic import BaseModel, ConfigDict, Field

from spellrank.constants import MAX_TIER, MIN_TIER


class Word(BaseModel):
    """Spelling word, read-only to the core"""
    model_config = ConfigDict(frozen=True)

    id: str
    word: str
    tier: int = Field(ge=MIN_TIER, le=MAX_TIER)
    definition: str = ""
    sentence: str = ""
    audio_url: Optional[str] = None
    part_of_speech: Optional[str] = None


@dataclass(frozen=True)
class WordsByTier:
    """Word pool keyed by difficulty tier"""
    tiers: Dict[int, List[Word]] = field(default_factory=dict)

    @classmethod
    def from_words(cls, words: Iterable[Word]) -> 'WordsByTier':
        grouped: Dict[int, List[Word]] = {}
        for word in words:
            grouped.setdefault(word.tier, []).append(word)
        return cls(tiers=grouped)

    def in_tier(self, tier: int) -> List[Word]:
        return self.tiers.get(tier, [])

    def all_words(self) -> List[Word]:
        # Stable order so a seeded random source picks the same word each run
        return [word for tier in sorted(self.tiers) for word in self.tiers[tier]]

    def __len__(self) -> int:
        return sum(len(words) for words in self.tiers.values())


class FallbackStage(str, Enum):
    """How far the selector had to relax its constraints"""
    PRIMARY = "primary"  # Effective tier, full exclusions
    ADJACENT = "adjacent"  # Another tier in the fallback order
    REPEAT_ALLOWED = "repeat_allowed"  # Primary tier, only the last word excluded
    ABSOLUTE = "absolute"  # Whole pool, no exclusions


@dataclass(frozen=True)
class SelectionResult:
    """Word chosen by the selector"""
    word: Word
    tier: int
    stage: FallbackStage

    @property
    def pool_near_exhaustion(self) -> bool:
        return self.stage == FallbackStage.ABSOLUTE
