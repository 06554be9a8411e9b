"""SpellRank Models Package"""

from spellrank.models.rating import (
    InputMode, RankTrack, RankTier, SkillRating, VisibleRank, TierProgress,
    rating_to_tier, tier_to_rating, get_tier_for_xp, tier_progress,
)
from spellrank.models.word import Word, WordsByTier, FallbackStage, SelectionResult
from spellrank.models.round import RoundResult, GameOutcome, FinalizeResult
from spellrank.models.evidence import (
    WordTiming, AudioTiming, LetterTimingEntry, LetterTimingSummary,
    AnswerEvidence, EvidenceSource, Classification,
)
from spellrank.models.glicko2 import SkillRatingEngine, skill_rating_engine

__all__ = [
    "InputMode", "RankTrack", "RankTier", "SkillRating", "VisibleRank", "TierProgress",
    "rating_to_tier", "tier_to_rating", "get_tier_for_xp", "tier_progress",
    "Word", "WordsByTier", "FallbackStage", "SelectionResult",
    "RoundResult", "GameOutcome", "FinalizeResult",
    "WordTiming", "AudioTiming", "LetterTimingEntry", "LetterTimingSummary",
    "AnswerEvidence", "EvidenceSource", "Classification",
    "SkillRatingEngine", "skill_rating_engine",
]
