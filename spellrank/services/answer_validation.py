#    _____  _____   ______  _       _       _____             _   _  _  __
#   / ____||  __ \ |  ____|| |     | |     |  __ \     /\    | \ | || |/ /
#  | (___  | |__) || |__   | |     | |     | |__) |   /  \   |  \| || ' /
#   \___ \ |  ___/ |  __|  | |     | |     |  _  /   / /\ \  | . ` ||  <
#   ____) || |     | |____ | |____ | |____ | | \ \  / ____ \ | |\  || . \
#  |_____/ |_|     |______||______||______||_|  \_\/_/    \_\|_| \_||_|\_\
#

# Answer validation - Decides whether a submitted answer spells the word correctly.

# --------------------------------------------------------------------------
#                                  Functions
# --------------------------------------------------------------------------
# edit_distance: Levenshtein distance between two strings.
# calculate_similarity: 0-1 closeness score derived from the edit distance.
# validate_answer: Checks a voice or keyboard answer against the correct word.

# --------------------------------------------------------------------------
#                            Variables and others
# --------------------------------------------------------------------------
# RejectionReason: Enum of reasons an answer is refused before comparison.
# AnswerValidation: Dataclass for the result of validate_answer.

# --------------------------------------------------------------------------
#                                   imports
# --------------------------------------------------------------------------
# dataclasses: Result structure.
# enum: Enumerations.
# typing: Type hints.
# spellrank.models.rating: Input modes.
# spellrank.utils.letters: Transcript normalisation and letter extraction.

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from spellrank.models.rating import InputMode
from spellrank.utils.letters import extract_letters, is_spelled_out, normalize_answer


class RejectionReason(str, Enum):
    NOT_SPELLED_OUT = "not_spelled_out"


@dataclass(frozen=True)
class AnswerValidation:
    """Result of checking one answer"""
    is_correct: bool
    normalized_answer: str
    normalized_correct: str
    similarity: float
    was_spelled_out: Optional[bool] = None  # Only set for voice answers
    rejection_reason: Optional[RejectionReason] = None


def edit_distance(a: str, b: str) -> int:
    """Levenshtein edit distance between two strings"""
    if len(a) < len(b):
        return edit_distance(b, a)

    if len(b) == 0:
        return len(a)

    previous_row = list(range(len(b) + 1))
    for i, ca in enumerate(a):
        current_row = [i + 1]
        for j, cb in enumerate(b):
            insertions = previous_row[j + 1] + 1
            deletions = current_row[j] + 1
            substitutions = previous_row[j] + (ca != cb)
            current_row.append(min(insertions, deletions, substitutions))
        previous_row = current_row

    return previous_row[-1]


def calculate_similarity(a: str, b: str) -> float:
    """1.0 for identical strings, 0.0 when nothing lines up"""
    if a == b:
        return 1.0
    if not a or not b:
        return 0.0
    return 1 - edit_distance(a, b) / max(len(a), len(b))


def validate_answer(
    answer: str,
    correct_word: str,
    input_mode: InputMode = InputMode.KEYBOARD,
) -> AnswerValidation:
    """
    Validate a player's answer against the correct word.

    Voice answers must be spelled letter by letter; saying the word is
    rejected before any comparison. Keyboard answers are compared after
    normalisation.

    Args:
        answer: Voice transcript or typed text
        correct_word: The word being spelled
        input_mode: How the answer was entered

    Returns:
        AnswerValidation with correctness, normalised values and similarity
    """
    normalized_correct = normalize_answer(correct_word)

    if InputMode(input_mode) == InputMode.VOICE:
        if not is_spelled_out(answer, correct_word):
            return AnswerValidation(
                is_correct=False,
                normalized_answer=normalize_answer(answer),
                normalized_correct=normalized_correct,
                similarity=0.0,
                was_spelled_out=False,
                rejection_reason=RejectionReason.NOT_SPELLED_OUT,
            )

        letters = extract_letters(answer)
        return AnswerValidation(
            is_correct=letters == normalized_correct,
            normalized_answer=letters,
            normalized_correct=normalized_correct,
            similarity=calculate_similarity(letters, normalized_correct),
            was_spelled_out=True,
        )

    normalized_answer = normalize_answer(answer)
    return AnswerValidation(
        is_correct=normalized_answer == normalized_correct,
        normalized_answer=normalized_answer,
        normalized_correct=normalized_correct,
        similarity=calculate_similarity(normalized_answer, normalized_correct),
    )
