#    _____  _____   ______  _       _       _____             _   _  _  __
#   / ____||  __ \ |  ____|| |     | |     |  __ \     /\    | \ | || |/ /
#  | (___  | |__) || |__   | |     | |     | |__) |   /  \   |  \| || ' /
#   \___ \ |  ___/ |  __|  | |     | |     |  _  /   / /\ \  | . ` ||  <
#   ____) || |     | |____ | |____ | |____ | | \ \  / ____ \ | |\  || . \
#  |_____/ |_|     |______||______||______||_|  \_\/_/    \_\|_| \_||_|\_\
#

# Game service - Wires the rating core to storage: per-answer verdicts, next word, game finish.

# --------------------------------------------------------------------------
#                                  Functions
# --------------------------------------------------------------------------
# GameService.check_answer: Classifies one answer's timing evidence.
# GameService.check_spelling: Validates an answer against the word for the track's input mode.
# GameService.next_word: Picks the next word from the player's hidden tier.
# GameService.finish_game: Finalizes a game and saves rating and rank with conflict retry.
# GameService._save_rating: One load-finalize-save attempt for the hidden rating.
# GameService._save_rank: One load-apply-save attempt for the visible rank.

# --------------------------------------------------------------------------
#                            Variables and others
# --------------------------------------------------------------------------
# GameService: Service class.
# logger: Logger instance.

# --------------------------------------------------------------------------
#                                   imports
# --------------------------------------------------------------------------
# dataclasses: Replacing the saved rating in a result.
# logging: Logging.
# typing: Type hints.
# spellrank.models: Domain types.
# spellrank.persistence: Store interface.
# spellrank.services: Core services.
# spellrank.utils.retry: Conflict retry helper.

from dataclasses import replace
import logging
from typing import AbstractSet, Any, Mapping, Optional, Sequence, Union

from spellrank.models.evidence import AnswerEvidence, Classification
from spellrank.models.rating import RankTrack, VisibleRank
from spellrank.models.round import FinalizeResult, RoundResult
from spellrank.models.word import SelectionResult, WordsByTier
from spellrank.persistence import SkillRatingStore
from spellrank.services.answer_validation import AnswerValidation, validate_answer
from spellrank.services.anticheat import AnswerAuthenticityClassifier, answer_classifier
from spellrank.services.finalizer import RoundFinalizer, parse_rounds, round_finalizer, validate_rounds
from spellrank.services.word_selector import WordSelector
from spellrank.utils.retry import retry_on_conflict

logger = logging.getLogger(__name__)


class GameService:
    """Per-user game flow on top of a SkillRatingStore"""

    def __init__(
        self,
        store: SkillRatingStore,
        finalizer: Optional[RoundFinalizer] = None,
        classifier: Optional[AnswerAuthenticityClassifier] = None,
        selector: Optional[WordSelector] = None,
        max_retries: Optional[int] = None,
        retry_delay: Optional[float] = None,
    ):
        self.store = store
        self.finalizer = finalizer if finalizer is not None else round_finalizer
        self.classifier = classifier if classifier is not None else answer_classifier
        self.selector = selector if selector is not None else WordSelector()
        self.max_retries = max_retries
        self.retry_delay = retry_delay

    def check_answer(self, evidence: AnswerEvidence) -> Classification:
        """Classify an answer; raw evidence is logged at DEBUG for threshold tuning"""
        logger.debug(f"Answer evidence: {evidence.model_dump(by_alias=True)}")
        verdict = self.classifier.classify(evidence)
        if not verdict.looks_like_spelling:
            logger.info(f"Answer flagged as said, not spelled ({verdict.rationale})")
        return verdict

    def check_spelling(self, track: RankTrack, answer: str, correct_word: str) -> AnswerValidation:
        """Correctness of one answer; voice tracks must spell letter by letter"""
        result = validate_answer(answer, correct_word, RankTrack(track).input_mode)
        if result.rejection_reason is not None:
            logger.info(f"Answer rejected on {RankTrack(track).value}: {result.rejection_reason.value}")
        return result

    async def next_word(
        self,
        user_id: str,
        track: RankTrack,
        pool: Optional[WordsByTier] = None,
        exclude: AbstractSet[str] = frozenset(),
        last_word_id: Optional[str] = None,
        adaptive_mixing: bool = False,
    ) -> SelectionResult:
        """Select the next word at the player's hidden tier (pool loaded from the store if not given)"""
        rating = await self.store.load_skill_rating(user_id, track)
        if pool is None:
            pool = WordsByTier.from_words(await self.store.load_word_pool())
        return self.selector.select_word(
            rating.derived_tier,
            pool,
            exclude=exclude,
            last_word_id=last_word_id,
            adaptive_mixing=adaptive_mixing,
        )

    async def finish_game(
        self,
        user_id: str,
        track: RankTrack,
        rounds: Sequence[Union[RoundResult, Mapping[str, Any]]],
        word_tiers: Optional[Mapping[str, int]] = None,
    ) -> FinalizeResult:
        """
        Finalize a game and persist it.

        The hidden rating and the visible rank are saved in two separate
        compare-and-set steps, each retried on its own, so a conflict on the
        rank never re-applies the game to an already saved rating.

        Raises:
            InvalidInput: Malformed rounds (nothing is written)
            ConcurrencyConflict: A save still conflicted after every retry
        """
        track = RankTrack(track)
        ordered = validate_rounds(parse_rounds(rounds))

        result = await retry_on_conflict(
            self._save_rating, user_id, track, ordered, word_tiers,
            max_retries=self.max_retries,
            retry_delay=self.retry_delay,
            label=f"Skill rating save for {user_id}/{track.value}",
        )
        await retry_on_conflict(
            self._save_rank, user_id, track, result,
            max_retries=self.max_retries,
            retry_delay=self.retry_delay,
            label=f"Visible rank save for {user_id}/{track.value}",
        )
        return result

    async def _save_rating(
        self,
        user_id: str,
        track: RankTrack,
        rounds: Sequence[RoundResult],
        word_tiers: Optional[Mapping[str, int]],
    ) -> FinalizeResult:
        prior = await self.store.load_skill_rating(user_id, track)
        result = self.finalizer.finalize(rounds, prior, word_tiers)
        if result.new_rating is prior:
            # Empty game, nothing to write
            return result
        saved = await self.store.save_skill_rating(result.new_rating, prior.version)
        return replace(result, new_rating=saved)

    async def _save_rank(self, user_id: str, track: RankTrack, result: FinalizeResult) -> VisibleRank:
        rank = await self.store.load_visible_rank(user_id, track)
        updated = self.finalizer.apply_to_rank(rank, result)
        if updated == rank:
            return rank
        if updated.tier != rank.tier:
            logger.info(f"{user_id}/{track.value} reached {updated.tier.value} ({updated.xp} XP)")
        return await self.store.save_visible_rank(updated, rank.version)
