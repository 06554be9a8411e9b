#    _____  _____   ______  _       _       _____             _   _  _  __
#   / ____||  __ \ |  ____|| |     | |     |  __ \     /\    | \ | || |/ /
#  | (___  | |__) || |__   | |     | |     | |__) |   /  \   |  \| || ' /
#   \___ \ |  ___/ |  __|  | |     | |     |  _  /   / /\ \  | . ` ||  <
#   ____) || |     | |____ | |____ | |____ | | \ \  / ____ \ | |\  || . \
#  |_____/ |_|     |______||______||______||_|  \_\/_/    \_\|_| \_||_|\_\
#

# Evidence models - Timing evidence captured while a player spoke an answer.

# --------------------------------------------------------------------------
#                            Variables and others
# --------------------------------------------------------------------------
# WordTiming: One recognised word with provider start/end timestamps.
# AudioTiming: Provider-side word timing summary and verdict.
# LetterTimingEntry: One newly recognised letter in the interim transcript.
# LetterTimingSummary: Client-side letter gap summary and verdict.
# AnswerEvidence: Everything known about how one answer was produced.
# EvidenceSource: Which signal decided a classification.
# Classification: Spelling-vs-saying verdict with rationale.

# --------------------------------------------------------------------------
#                                   imports
# --------------------------------------------------------------------------
# pydantic: Data validation.
# dataclasses: Data structures.
# enum: Enumerations.
# typing: Type hints.

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class WordTiming(BaseModel):
    """Word-level timestamp from the speech provider (seconds)"""
    model_config = ConfigDict(frozen=True)

    word: str
    start: float
    end: float


class AudioTiming(BaseModel):
    """Audio-level timing from the speech provider"""
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    word_count: int = Field(ge=0, alias="wordCount")
    avg_gap_seconds: float = Field(ge=0, alias="avgGapSeconds")
    looks_like_spelling: bool = Field(alias="looksLikeSpelling")


class LetterTimingEntry(BaseModel):
    """A letter that appeared in the interim transcript"""
    model_config = ConfigDict(frozen=True)

    letter: str
    timestamp_ms: float
    gap_from_previous_ms: float = Field(ge=0)


class LetterTimingSummary(BaseModel):
    """Letter-appearance timing extracted from interim transcripts"""
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    average_letter_gap_ms: float = Field(ge=0, alias="averageLetterGapMs")
    looks_like_spelling: bool = Field(alias="looksLikeSpelling")
    letter_count: int = Field(ge=0, alias="letterCount")


class AnswerEvidence(BaseModel):
    """Timing evidence for a single answer submission, never persisted"""
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    audio_timing: Optional[AudioTiming] = Field(default=None, alias="audioTiming")
    letter_timing: Optional[LetterTimingSummary] = Field(default=None, alias="letterTiming")


class EvidenceSource(str, Enum):
    AUDIO = "audio"
    LETTER = "letter"
    NONE = "none"


@dataclass(frozen=True)
class Classification:
    """Result of the spelling-vs-saying check"""
    looks_like_spelling: bool
    source: EvidenceSource
    rationale: str
