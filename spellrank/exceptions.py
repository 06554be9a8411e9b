#    _____  _____   ______  _       _       _____             _   _  _  __
#   / ____||  __ \ |  ____|| |     | |     |  __ \     /\    | \ | || |/ /
#  | (___  | |__) || |__   | |     | |     | |__) |   /  \   |  \| || ' /
#   \___ \ |  ___/ |  __|  | |     | |     |  _  /   / /\ \  | . ` ||  <
#   ____) || |     | |____ | |____ | |____ | | \ \  / ____ \ | |\  || . \
#  |_____/ |_|     |______||______||______||_|  \_\/_/    \_\|_| \_||_|\_\
#

# Exceptions - Error taxonomy raised by the rating, selection and finalize paths.

# --------------------------------------------------------------------------
#                            Variables and others
# --------------------------------------------------------------------------
# SpellRankError: Base class for all core errors.
# InvalidInput: Malformed round batch or out-of-range argument.
# PoolExhausted: No word available anywhere in the pool.
# ConvergenceFailure: Volatility solve ran out of iterations.
# ConcurrencyConflict: Stale write detected by the persistence layer.


class SpellRankError(Exception):
    """Base error for the spellrank core"""


class InvalidInput(SpellRankError, ValueError):
    """Input rejected before any computation happened"""


class PoolExhausted(SpellRankError):
    """No word could be selected, even with every exclusion lifted"""


class ConvergenceFailure(SpellRankError):
    """Glicko-2 volatility iteration did not converge within its budget"""

    def __init__(self, iterations: int):
        super().__init__(f"Volatility did not converge after {iterations} iterations")
        self.iterations = iterations


class ConcurrencyConflict(SpellRankError):
    """Stored row changed between load and save"""

    def __init__(self, user_id: str, track: str, expected_version: int, actual_version: int | None):
        super().__init__(
            f"Stale write for {user_id}/{track}: expected version {expected_version}, "
            f"found {actual_version}"
        )
        self.user_id = user_id
        self.track = track
        self.expected_version = expected_version
        self.actual_version = actual_version
