#    _____  _____   ______  _       _       _____             _   _  _  __
#   / ____||  __ \ |  ____|| |     | |     |  __ \     /\    | \ | || |/ /
#  | (___  | |__) || |__   | |     | |     | |__) |   /  \   |  \| || ' /
#   \___ \ |  ___/ |  __|  | |     | |     |  _  /   / /\ \  | . ` ||  <
#   ____) || |     | |____ | |____ | |____ | | \ \  / ____ \ | |\  || . \
#  |_____/ |_|     |______||______||______||_|  \_\/_/    \_\|_| \_||_|\_\
#

# Anti-cheat service - Decides whether a spoken answer was spelled or just said.

# --------------------------------------------------------------------------
#                                  Functions
# --------------------------------------------------------------------------
# track_letter_timings: Folds interim transcript updates into letter timing entries.
# AnswerAuthenticityClassifier.summarize_letter_timings: Average gap + verdict from entries.
# AnswerAuthenticityClassifier.analyze_word_timings: Provider-side verdict from word timestamps.
# AnswerAuthenticityClassifier.classify: Main entry point, audio first then letter timing.
# AnswerAuthenticityClassifier.classify_letter_timings: Shortcut from raw entries to a verdict.

# --------------------------------------------------------------------------
#                            Variables and others
# --------------------------------------------------------------------------
# InterimUpdate: (timestamp_ms, transcript) pair from the speech provider.
# AnswerAuthenticityClassifier: Singleton service class.
# answer_classifier: Singleton instance.

# --------------------------------------------------------------------------
#                                   imports
# --------------------------------------------------------------------------
# functools.reduce: Explicit fold over interim updates.
# statistics: Mean of letter gaps.
# typing: Type hints.
# spellrank.config: Thresholds.
# spellrank.models.evidence: Evidence and classification types.
# spellrank.utils.letters: Letter extraction from transcripts.

import statistics
from functools import reduce
from typing import Iterable, NamedTuple, Optional, Sequence, Tuple

from spellrank.config import get_settings
from spellrank.constants import (
    SINGLE_LETTER_RATIO_THRESHOLD,
    WORD_TO_LETTER_RATIO_THRESHOLD,
)
from spellrank.models.evidence import (
    AnswerEvidence,
    AudioTiming,
    Classification,
    EvidenceSource,
    LetterTimingEntry,
    LetterTimingSummary,
    WordTiming,
)
from spellrank.utils.letters import extract_letters, normalize_answer


class InterimUpdate(NamedTuple):
    """One interim transcript as delivered by the recogniser"""
    timestamp_ms: float
    transcript: str


class _TrackerState(NamedTuple):
    entries: Tuple[LetterTimingEntry, ...]
    letter_count: int
    last_letter_at: Optional[float]


def _fold_update(state: _TrackerState, update: InterimUpdate) -> _TrackerState:
    letters = extract_letters(update.transcript)
    if len(letters) <= state.letter_count:
        # Revisions and repeats add no letters; the gap clock keeps running
        return state

    new_entries = []
    for offset, letter in enumerate(letters[state.letter_count:]):
        if offset == 0 and state.last_letter_at is not None:
            gap = max(0.0, update.timestamp_ms - state.last_letter_at)
        else:
            # First letter ever, or later letters of the same burst
            gap = 0.0
        new_entries.append(LetterTimingEntry(
            letter=letter,
            timestamp_ms=update.timestamp_ms,
            gap_from_previous_ms=gap,
        ))

    return _TrackerState(
        entries=state.entries + tuple(new_entries),
        letter_count=len(letters),
        last_letter_at=update.timestamp_ms,
    )


def track_letter_timings(updates: Iterable[InterimUpdate | tuple]) -> Tuple[LetterTimingEntry, ...]:
    """
    Build letter timing entries from a stream of interim transcripts.

    Each time the recognised letter count grows, one entry per new letter is
    recorded. The gap is measured from the previous update that added letters,
    so spelling shows steady gaps while a word said aloud arrives as a single
    burst of zero gaps.
    """
    initial = _TrackerState(entries=(), letter_count=0, last_letter_at=None)
    final = reduce(
        _fold_update,
        (InterimUpdate(*update) for update in updates),
        initial,
    )
    return final.entries


class AnswerAuthenticityClassifier:
    """
    Spelling-vs-saying decision for voice answers.

    Signals, in priority order:
    1. Audio timing from the speech provider (trusted verdict)
    2. Letter appearance timing from interim transcripts (>= 100ms average gap)
    3. Nothing usable: lenient, looks like spelling
    """

    def __init__(
        self,
        letter_gap_threshold_ms: Optional[float] = None,
        audio_gap_threshold_ms: Optional[float] = None,
        min_seconds_per_letter: Optional[float] = None,
    ):
        settings = get_settings()
        self.letter_gap_threshold_ms = (
            settings.letter_gap_threshold_ms
            if letter_gap_threshold_ms is None else letter_gap_threshold_ms
        )
        self.audio_gap_threshold_ms = (
            settings.audio_gap_threshold_ms
            if audio_gap_threshold_ms is None else audio_gap_threshold_ms
        )
        self.min_seconds_per_letter = (
            settings.min_seconds_per_letter
            if min_seconds_per_letter is None else min_seconds_per_letter
        )

    def summarize_letter_timings(self, entries: Sequence[LetterTimingEntry]) -> LetterTimingSummary:
        """Average the gaps (the first is always 0 and is skipped)"""
        if len(entries) < 2:
            return LetterTimingSummary(
                average_letter_gap_ms=0.0,
                looks_like_spelling=True,
                letter_count=len(entries),
            )

        average = statistics.fmean(e.gap_from_previous_ms for e in entries[1:])
        return LetterTimingSummary(
            average_letter_gap_ms=average,
            looks_like_spelling=average >= self.letter_gap_threshold_ms,
            letter_count=len(entries),
        )

    def analyze_word_timings(
        self,
        words: Sequence[WordTiming],
        transcript: Optional[str] = None,
    ) -> AudioTiming:
        """
        Provider-side verdict from word-level timestamps.

        Spelling "C A T" is heard as three one-letter words with pauses;
        saying "cat" is heard as one word.
        """
        if transcript is None:
            transcript = " ".join(w.word for w in words)

        word_count = len(words)
        letter_count = len(normalize_answer(transcript))
        single_letter_words = sum(1 for w in words if len(normalize_answer(w.word)) == 1)

        total_gap = 0.0
        for previous, current in zip(words, words[1:]):
            gap = current.start - previous.end
            if gap > 0:
                total_gap += gap
        avg_gap_seconds = total_gap / (word_count - 1) if word_count > 1 else 0.0

        total_duration = words[-1].end - words[0].start if words else 0.0
        seconds_per_letter = total_duration / letter_count if letter_count else 0.0

        multiple_words = word_count > 1
        mostly_single_letters = (
            word_count > 0 and single_letter_words / word_count >= SINGLE_LETTER_RATIO_THRESHOLD
        )
        count_matches_letters = (
            letter_count > 0 and word_count / letter_count >= WORD_TO_LETTER_RATIO_THRESHOLD
        )
        significant_gaps = avg_gap_seconds * 1000 >= self.audio_gap_threshold_ms

        if word_count == 0:
            spelled = True
        elif letter_count == 1:
            spelled = True  # "I", "A"
        elif word_count == 1 and single_letter_words == 0 and letter_count >= 2:
            spelled = False  # One multi-letter word heard: said, not spelled
        elif multiple_words and (mostly_single_letters or count_matches_letters):
            spelled = True
        elif multiple_words and significant_gaps:
            spelled = True
        elif letter_count >= 3 and seconds_per_letter < self.min_seconds_per_letter:
            spelled = False  # Too fast to be spelling
        else:
            spelled = True

        return AudioTiming(
            word_count=word_count,
            avg_gap_seconds=avg_gap_seconds,
            looks_like_spelling=spelled,
        )

    def classify(self, evidence: AnswerEvidence) -> Classification:
        """Decide whether an answer looks spelled out. Never raises."""
        audio = evidence.audio_timing
        if audio is not None:
            return Classification(
                looks_like_spelling=audio.looks_like_spelling,
                source=EvidenceSource.AUDIO,
                rationale=(
                    f"provider timing: {audio.word_count} words, "
                    f"avg gap {audio.avg_gap_seconds * 1000:.0f}ms"
                ),
            )

        letters = evidence.letter_timing
        if letters is not None:
            if letters.letter_count < 2:
                return Classification(
                    looks_like_spelling=True,
                    source=EvidenceSource.LETTER,
                    rationale=f"only {letters.letter_count} letter(s) tracked, trusting input",
                )
            spelled = letters.average_letter_gap_ms >= self.letter_gap_threshold_ms
            comparison = ">=" if spelled else "<"
            return Classification(
                looks_like_spelling=spelled,
                source=EvidenceSource.LETTER,
                rationale=(
                    f"avg letter gap {letters.average_letter_gap_ms:.0f}ms {comparison} "
                    f"{self.letter_gap_threshold_ms:.0f}ms over {letters.letter_count} letters"
                ),
            )

        return Classification(
            looks_like_spelling=True,
            source=EvidenceSource.NONE,
            rationale="no timing evidence, trusting input",
        )

    def classify_letter_timings(self, entries: Sequence[LetterTimingEntry]) -> Classification:
        return self.classify(AnswerEvidence(letter_timing=self.summarize_letter_timings(entries)))


# Singleton instance
answer_classifier = AnswerAuthenticityClassifier()
