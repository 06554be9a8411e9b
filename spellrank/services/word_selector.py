#    _____  _____   ______  _       _       _____             _   _  _  __
#   / ____||  __ \ |  ____|| |     | |     |  __ \     /\    | \ | || |/ /
#  | (___  | |__) || |__   | |     | |     | |__) |   /  \   |  \| || ' /
#   \___ \ |  ___/ |  __|  | |     | |     |  _  /   / /\ \  | . ` ||  <
#   ____) || |     | |____ | |____ | |____ | | \ \  / ____ \ | |\  || . \
#  |_____/ |_|     |______||______||______||_|  \_\/_/    \_\|_| \_||_|\_\
#

# Word selector - Picks the next word for a target tier with graceful fallback.

# --------------------------------------------------------------------------
#                                  Functions
# --------------------------------------------------------------------------
# fallback_order: Tier order tried for a given starting tier.
# WordSelector._effective_tier: Applies adaptive mixing to the primary tier.
# WordSelector._draw: Uniform draw from a tier minus blocked ids.
# WordSelector.select_word: Main entry point, walks the fallback stages.

# --------------------------------------------------------------------------
#                            Variables and others
# --------------------------------------------------------------------------
# WordSelector: Service class, randomness is injected.
# logger: Logger instance.

# --------------------------------------------------------------------------
#                                   imports
# --------------------------------------------------------------------------
# random: Injected random source.
# logging: Logging.
# typing: Type hints.
# spellrank.config: Adaptive mixing probability.
# spellrank.models.word: Word pool and selection result types.

import logging
import random
from typing import AbstractSet, List, Optional, Sequence

from spellrank.config import get_settings
from spellrank.constants import MAX_TIER, MIN_TIER
from spellrank.exceptions import InvalidInput, PoolExhausted
from spellrank.models.word import FallbackStage, SelectionResult, Word, WordsByTier

logger = logging.getLogger(__name__)


def fallback_order(tier: int) -> List[int]:
    """Starting tier, then harder/easier at growing offsets: 4 -> 4,5,3,6,2,7,1"""
    order = [tier]
    for offset in range(1, MAX_TIER - MIN_TIER + 1):
        if tier + offset <= MAX_TIER:
            order.append(tier + offset)
        if tier - offset >= MIN_TIER:
            order.append(tier - offset)
    return order


class WordSelector:
    """
    Chooses one word per round.

    Fallback stages, in order:
    1. Effective tier then the rest of the fallback order, full exclusions
    2. Primary tier again, only the previous word excluded (history repeats allowed)
    3. Any word in the pool, no exclusions (pool near exhaustion)
    """

    def __init__(
        self,
        rng: Optional[random.Random] = None,
        mixing_probability: Optional[float] = None,
    ):
        self.rng = rng if rng is not None else random.Random()
        self.mixing_probability = (
            get_settings().adaptive_mixing_probability
            if mixing_probability is None else mixing_probability
        )

    def _effective_tier(self, primary_tier: int, adaptive_mixing: bool) -> int:
        """Occasionally drift one tier up or down for variety"""
        if not adaptive_mixing:
            return primary_tier
        if self.rng.random() >= self.mixing_probability:
            return primary_tier
        shifted = primary_tier + self.rng.choice((-1, 1))
        return max(MIN_TIER, min(MAX_TIER, shifted))

    def _draw(self, words: Sequence[Word], blocked: AbstractSet[str]) -> Optional[Word]:
        candidates = [w for w in words if w.id not in blocked]
        if not candidates:
            return None
        return self.rng.choice(candidates)

    def select_word(
        self,
        primary_tier: int,
        pool: WordsByTier,
        exclude: AbstractSet[str] = frozenset(),
        last_word_id: Optional[str] = None,
        adaptive_mixing: bool = False,
    ) -> SelectionResult:
        """
        Select the next word.

        Args:
            primary_tier: Target tier (1-7), normally the hidden derived tier
            pool: Available words grouped by tier
            exclude: Word ids already served this game
            last_word_id: Word served in the previous round
            adaptive_mixing: Enable the small chance of an adjacent tier

        Returns:
            SelectionResult with the word and the fallback stage used
        """
        if not MIN_TIER <= primary_tier <= MAX_TIER:
            raise InvalidInput(f"Tier must be {MIN_TIER}-{MAX_TIER}, got {primary_tier}")

        effective_tier = self._effective_tier(primary_tier, adaptive_mixing)
        blocked = set(exclude)
        if last_word_id is not None:
            blocked.add(last_word_id)

        # --- 1. FALLBACK ORDER, FULL EXCLUSION ---
        for tier in fallback_order(effective_tier):
            word = self._draw(pool.in_tier(tier), blocked)
            if word is not None:
                stage = FallbackStage.PRIMARY if tier == effective_tier else FallbackStage.ADJACENT
                if stage == FallbackStage.ADJACENT:
                    logger.debug(f"Tier {effective_tier} exhausted, served tier {tier}")
                return SelectionResult(word=word, tier=tier, stage=stage)

        # --- 2. ALLOW REPEATS FROM HISTORY ---
        repeat_blocked = {last_word_id} if last_word_id is not None else set()
        word = self._draw(pool.in_tier(primary_tier), repeat_blocked)
        if word is not None:
            logger.info(
                f"All tiers exhausted under exclusion ({len(exclude)} ids), "
                f"repeating from tier {primary_tier}"
            )
            return SelectionResult(word=word, tier=primary_tier, stage=FallbackStage.REPEAT_ALLOWED)

        # --- 3. ABSOLUTE FALLBACK ---
        everything = pool.all_words()
        if not everything:
            raise PoolExhausted("Word pool is empty")

        word = self.rng.choice(everything)
        logger.warning(
            f"Word pool near exhaustion: absolute fallback served '{word.id}' "
            f"(primary tier {primary_tier}, pool size {len(pool)})"
        )
        return SelectionResult(word=word, tier=word.tier, stage=FallbackStage.ABSOLUTE)
