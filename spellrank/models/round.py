#    _____  _____   ______  _       _       _____             _   _  _  __
#   / ____||  __ \ |  ____|| |     | |     |  __ \     /\    | \ | || |/ /
#  | (___  | |__) || |__   | |     | |     | |__) |   /  \   |  \| || ' /
#   \___ \ |  ___/ |  __|  | |     | |     |  _  /   / /\ \  | . ` ||  <
#   ____) || |     | |____ | |____ | |____ | | \ \  / ____ \ | |\  || . \
#  |_____/ |_|     |______||______||______||_|  \_\/_/    \_\|_| \_||_|\_\
#

# Round models - Per-round results and the values produced when a game ends.

# --------------------------------------------------------------------------
#                            Variables and others
# --------------------------------------------------------------------------
# RoundResult: Outcome of one answered round.
# GameOutcome: Aggregate correctness handed to the rating engine.
# FinalizeResult: Everything persistence must store after a game.

# --------------------------------------------------------------------------
#                                   imports
# --------------------------------------------------------------------------
# pydantic: Data validation.
# dataclasses: Data structures.
# spellrank.models.rating: SkillRating.

from dataclasses import dataclass

from pydantic import BaseModel, ConfigDict, Field

from spellrank.constants import DEFAULT_TIER
from spellrank.models.rating import SkillRating


class RoundResult(BaseModel):
    """One answered round, as reported by gameplay"""
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    round_number: int = Field(ge=1, alias="roundNumber")  # 1-indexed, unique per game
    word_id: str = Field(alias="wordId")
    answer: str
    is_correct: bool = Field(alias="isCorrect")
    time_taken_seconds: float = Field(ge=0, alias="timeTakenSeconds")


@dataclass(frozen=True)
class GameOutcome:
    """Aggregate correctness of one finished game"""
    correct: int
    wrong: int
    average_word_tier: int = DEFAULT_TIER

    @property
    def total(self) -> int:
        return self.correct + self.wrong


@dataclass(frozen=True)
class FinalizeResult:
    """Values produced by finalizing a game"""
    longest_streak: int
    correct_count: int
    wrong_count: int
    new_rating: SkillRating
    xp_delta: int
    average_word_tier: int = DEFAULT_TIER
