#    _____  _____   ______  _       _       _____             _   _  _  __
#   / ____||  __ \ |  ____|| |     | |     |  __ \     /\    | \ | || |/ /
#  | (___  | |__) || |__   | |     | |     | |__) |   /  \   |  \| || ' /
#   \___ \ |  ___/ |  __|  | |     | |     |  _  /   / /\ \  | . ` ||  <
#   ____) || |     | |____ | |____ | |____ | | \ \  / ____ \ | |\  || . \
#  |_____/ |_|     |______||______||______||_|  \_\/_/    \_\|_| \_||_|\_\
#

# Glicko-2 Rating System - Hidden skill rating updates after each finished game.

# --------------------------------------------------------------------------
#                                  Functions
# --------------------------------------------------------------------------
# to_glicko2_scale / from_glicko2_scale: Rating scale conversion.
# SkillRatingEngine._g: Glicko-2 g-function.
# SkillRatingEngine._E: Expected score function.
# SkillRatingEngine._compute_variance: Estimated variance for a batch against one opponent.
# SkillRatingEngine._compute_delta: Estimated improvement for the batch.
# SkillRatingEngine._compute_new_volatility: Illinois iteration with a fixed budget.
# SkillRatingEngine.update_skill_rating: Main entry point, one game = one rating period.
# SkillRatingEngine.rating_change: Signed rating difference between two states.

# --------------------------------------------------------------------------
#                            Variables and others
# --------------------------------------------------------------------------
# SkillRatingEngine: Class implementing the rating logic.
# skill_rating_engine: Singleton instance.
# logger: Logger instance.

# --------------------------------------------------------------------------
#                                   imports
# --------------------------------------------------------------------------
# math: Mathematical functions.
# logging: Logging.
# typing: Type hints.
# spellrank.config: Tunable settings (tau, iteration budget, rating bounds).
# spellrank.models.rating: SkillRating and tier helpers.

import logging
import math
from typing import Optional

from spellrank.config import get_settings
from spellrank.constants import (
    EPSILON,
    GLICKO2_SCALE,
    INITIAL_RATING,
    INITIAL_RD,
    INITIAL_VOLATILITY,
    MAX_RD,
    MAX_TIER,
    MAX_VOLATILITY,
    MIN_RD,
    MIN_TIER,
    MIN_VOLATILITY,
    WORD_OPPONENT_RD,
)
from spellrank.exceptions import ConvergenceFailure, InvalidInput
from spellrank.models.rating import SkillRating, rating_to_tier, tier_to_rating
from spellrank.models.round import GameOutcome

logger = logging.getLogger(__name__)


def to_glicko2_scale(rating: float, rd: float) -> tuple[float, float]:
    """Convert display rating and RD to (mu, phi)"""
    return (rating - INITIAL_RATING) / GLICKO2_SCALE, rd / GLICKO2_SCALE


def from_glicko2_scale(mu: float, phi: float) -> tuple[float, float]:
    """Convert (mu, phi) back to display rating and RD"""
    return mu * GLICKO2_SCALE + INITIAL_RATING, phi * GLICKO2_SCALE


class SkillRatingEngine:
    """
    Glicko-2 rating engine for the hidden difficulty tier.

    Each finished game is one rating period. Every round is a match against
    a synthetic opponent whose rating is the anchor of the game's average
    word tier:
    - Correct answer = win (score 1.0)
    - Wrong answer = loss (score 0.0)
    All rounds share that opponent, so the per-round sums collapse to
    counts times a single g/E pair.
    """

    def __init__(
        self,
        tau: Optional[float] = None,
        max_iterations: Optional[int] = None,
        rating_floor: Optional[float] = None,
        rating_ceiling: Optional[float] = None,
    ):
        settings = get_settings()
        self.tau = settings.glicko_tau if tau is None else tau
        self.max_iterations = (
            settings.volatility_max_iterations if max_iterations is None else max_iterations
        )
        self.rating_floor = settings.rating_floor if rating_floor is None else rating_floor
        self.rating_ceiling = settings.rating_ceiling if rating_ceiling is None else rating_ceiling

    def _g(self, phi: float) -> float:
        """Glicko-2 g function"""
        return 1 / math.sqrt(1 + 3 * phi**2 / math.pi**2)

    def _E(self, mu: float, mu_j: float, phi_j: float) -> float:
        """Expected score function"""
        return 1 / (1 + math.exp(-self._g(phi_j) * (mu - mu_j)))

    def _compute_variance(self, mu: float, opp_mu: float, opp_phi: float, rounds: int) -> float:
        """Compute estimated variance"""
        g = self._g(opp_phi)
        E = self._E(mu, opp_mu, opp_phi)
        variance_sum = g**2 * E * (1 - E) * rounds
        return 1 / variance_sum if variance_sum > 0 else float('inf')

    def _compute_delta(
        self, mu: float, opp_mu: float, opp_phi: float, variance: float, outcome: GameOutcome
    ) -> float:
        """Compute estimated improvement"""
        g = self._g(opp_phi)
        E = self._E(mu, opp_mu, opp_phi)
        return variance * g * (outcome.correct - outcome.total * E)

    def _compute_new_volatility(self, sigma: float, phi: float,
                                variance: float, delta: float) -> float:
        """Compute new volatility using the Illinois algorithm.

        Raises ConvergenceFailure once the iteration budget is spent, both
        while bracketing and while narrowing the bracket.
        """
        a = math.log(sigma**2)
        phi_sq = phi**2

        def f(x: float) -> float:
            exp_x = math.exp(x)
            tmp = phi_sq + variance + exp_x
            return (exp_x * (delta**2 - phi_sq - variance - exp_x) /
                    (2 * tmp**2) - (x - a) / self.tau**2)

        # Set initial bounds
        A = a
        if delta**2 > phi_sq + variance:
            B = math.log(delta**2 - phi_sq - variance)
        else:
            k = 1
            while f(a - k * self.tau) < 0:
                k += 1
                if k > self.max_iterations:
                    raise ConvergenceFailure(k)
            B = a - k * self.tau

        f_A = f(A)
        f_B = f(B)

        iterations = 0
        while abs(B - A) > EPSILON:
            if iterations >= self.max_iterations:
                raise ConvergenceFailure(iterations)
            iterations += 1

            C = A + (A - B) * f_A / (f_B - f_A)
            f_C = f(C)

            if f_C * f_B <= 0:
                A = B
                f_A = f_B
            else:
                f_A = f_A / 2

            B = C
            f_B = f_C

        return math.exp(A / 2)

    def update_skill_rating(self, current: SkillRating, outcome: GameOutcome) -> SkillRating:
        """
        Apply one finished game to a skill rating.

        Args:
            current: Stored rating for the (user, track)
            outcome: Correct/wrong counts and the average word tier faced

        Returns:
            New SkillRating; the input itself when no round was answered
        """
        if outcome.correct < 0 or outcome.wrong < 0:
            raise InvalidInput(
                f"Round counts must be non-negative (correct={outcome.correct}, wrong={outcome.wrong})"
            )
        if not MIN_TIER <= outcome.average_word_tier <= MAX_TIER:
            raise InvalidInput(f"Average word tier out of range: {outcome.average_word_tier}")

        # Empty game: nothing to learn, and not a loss
        if outcome.total == 0:
            return current

        # Cold start always begins from the default state
        if current.games_played == 0:
            rating, rd, sigma = INITIAL_RATING, INITIAL_RD, INITIAL_VOLATILITY
        else:
            rating, rd, sigma = current.rating, current.rating_deviation, current.volatility

        # Step 1: Convert to Glicko-2 scale
        mu, phi = to_glicko2_scale(rating, rd)
        opp_mu, opp_phi = to_glicko2_scale(
            tier_to_rating(outcome.average_word_tier), WORD_OPPONENT_RD
        )

        # Step 2-3: Variance
        variance = self._compute_variance(mu, opp_mu, opp_phi, outcome.total)
        if variance == float('inf'):
            logger.warning(
                f"Degenerate variance for {current.user_id}/{current.track.value}, rating unchanged"
            )
            return current

        # Step 4: Delta
        delta = self._compute_delta(mu, opp_mu, opp_phi, variance, outcome)

        # Step 5: Volatility, keeping the previous value if the solve stalls
        try:
            new_sigma = self._compute_new_volatility(sigma, phi, variance, delta)
        except ConvergenceFailure as e:
            logger.warning(
                f"{e} for {current.user_id}/{current.track.value}; keeping volatility {sigma}"
            )
            new_sigma = sigma

        # Step 6: Pre-period phi
        phi_star = math.sqrt(phi**2 + new_sigma**2)

        # Step 7: New phi and mu
        g = self._g(opp_phi)
        E = self._E(mu, opp_mu, opp_phi)
        new_phi = 1 / math.sqrt(1 / phi_star**2 + 1 / variance)
        new_mu = mu + new_phi**2 * g * (outcome.correct - outcome.total * E)

        # Step 8: Back to display scale and clamp
        new_rating, new_rd = from_glicko2_scale(new_mu, new_phi)
        new_rating = max(self.rating_floor, min(self.rating_ceiling, new_rating))
        new_rd = max(MIN_RD, min(MAX_RD, new_rd))
        new_sigma = max(MIN_VOLATILITY, min(MAX_VOLATILITY, new_sigma))

        logger.debug(
            f"Rating update {current.user_id}/{current.track.value}: "
            f"{rating:.1f} -> {new_rating:.1f}, rd {rd:.1f} -> {new_rd:.1f}, "
            f"sigma {sigma:.4f} -> {new_sigma:.4f} "
            f"({outcome.correct}/{outcome.total} vs tier {outcome.average_word_tier})"
        )

        return current.model_copy(update={
            "rating": new_rating,
            "rating_deviation": new_rd,
            "volatility": new_sigma,
            "derived_tier": rating_to_tier(new_rating),
            "games_played": current.games_played + 1,
            "season_highest_rating": max(current.season_highest_rating, new_rating),
        })

    @staticmethod
    def rating_change(before: SkillRating, after: SkillRating) -> float:
        """Signed rating difference produced by an update"""
        return after.rating - before.rating


# Singleton instance
skill_rating_engine = SkillRatingEngine()
