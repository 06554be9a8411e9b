#    _____  _____   ______  _       _       _____             _   _  _  __
#   / ____||  __ \ |  ____|| |     | |     |  __ \     /\    | \ | || |/ /
#  | (___  | |__) || |__   | |     | |     | |__) |   /  \   |  \| || ' /
#   \___ \ |  ___/ |  __|  | |     | |     |  _  /   / /\ \  | . ` ||  <
#   ____) || |     | |____ | |____ | |____ | | \ \  / ____ \ | |\  || . \
#  |_____/ |_|     |______||______||______||_|  \_\/_/    \_\|_| \_||_|\_\
#

# Constants - Rating, tier, XP and anti-cheat values shared across the core.

# --------------------------------------------------------------------------
#                                  Functions
# --------------------------------------------------------------------------
# None

# --------------------------------------------------------------------------
#                            Variables and others
# --------------------------------------------------------------------------
# GLICKO2_SCALE: Conversion factor between display and Glicko-2 scales.
# INITIAL_RATING / INITIAL_RD / INITIAL_VOLATILITY: Cold start values.
# TIER_RATING_RANGES: Rating range covered by each hidden tier.
# XP_THRESHOLDS: XP needed for each visible rank tier.
# ... (various other constants)

# --------------------------------------------------------------------------
#                                   imports
# --------------------------------------------------------------------------
# None


# Tiers
MIN_TIER = 1
MAX_TIER = 7
DEFAULT_TIER = 4  # Mid-difficulty, used when word tiers are unknown

# Glicko-2 System
GLICKO2_SCALE = 173.7178
INITIAL_RATING = 1500.0
INITIAL_RD = 350.0
INITIAL_VOLATILITY = 0.06
MIN_RD = 30.0
MAX_RD = 350.0
MIN_VOLATILITY = 0.03
MAX_VOLATILITY = 0.10
TAU = 0.5  # Constrains how fast volatility can change
EPSILON = 0.000001  # Convergence tolerance
VOLATILITY_MAX_ITERATIONS = 20
RATING_FLOOR = 1000.0
RATING_CEILING = 2000.0
WORD_OPPONENT_RD = 50.0  # Low RD = word difficulty is well known

# Hidden tier ranges (rating -> tier 1-7)
TIER_RATING_RANGES = {
    1: (1000.0, 1149.0),
    2: (1150.0, 1299.0),
    3: (1300.0, 1449.0),
    4: (1450.0, 1599.0),  # Default starting tier
    5: (1600.0, 1749.0),
    6: (1750.0, 1899.0),
    7: (1900.0, float("inf")),
}

# Word Selection
ADAPTIVE_MIXING_PROBABILITY = 0.10  # Chance of drifting to an adjacent tier

# Anti-Cheat
LETTER_GAP_THRESHOLD_MS = 100.0  # Spelling is ~200-400ms, saying is <50-100ms
AUDIO_GAP_THRESHOLD_MS = 80.0
MIN_SECONDS_PER_LETTER = 0.10
SINGLE_LETTER_RATIO_THRESHOLD = 0.5
WORD_TO_LETTER_RATIO_THRESHOLD = 0.6

# XP System
XP_PER_CORRECT = 5

# Visible rank thresholds (XP)
XP_THRESHOLDS = {
    "new_bee": 0,
    "bumble_bee": 100,
    "busy_bee": 300,
    "honey_bee": 600,
    "worker_bee": 1000,
    "royal_bee": 1500,
    "bee_keeper": 2100,
}

# Concurrency Retry
CONFLICT_MAX_RETRIES = 3
CONFLICT_RETRY_DELAY_SECONDS = 0.05

# MongoDB
MONGODB_SERVER_SELECTION_TIMEOUT_MS = 5000
