"""SpellRank - adaptive difficulty and answer-authenticity core for a spelling game"""

__version__ = "1.0.0"
