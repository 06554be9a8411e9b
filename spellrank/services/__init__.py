"""SpellRank Services Package"""

from spellrank.services.word_selector import WordSelector
from spellrank.services.anticheat import AnswerAuthenticityClassifier
from spellrank.services.finalizer import RoundFinalizer
from spellrank.services.answer_validation import AnswerValidation, validate_answer
from spellrank.services.game import GameService

__all__ = [
    "WordSelector",
    "AnswerAuthenticityClassifier",
    "RoundFinalizer",
    "AnswerValidation",
    "validate_answer",
    "GameService",
]
