"""
Shared fixtures for the spellrank test suite.
"""

import os

import pytest

from spellrank.config import get_settings
from spellrank.models.rating import RankTrack, SkillRating
from spellrank.models.word import Word


@pytest.fixture(autouse=True)
def fresh_settings(monkeypatch):
    """Each test reads settings from a clean environment."""
    for key in list(os.environ):
        if key.startswith("SPELLRANK_"):
            monkeypatch.delenv(key)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def fresh_rating():
    return SkillRating.default("user-1", RankTrack.ENDLESS_VOICE)


@pytest.fixture
def seasoned_rating():
    return SkillRating(
        user_id="user-1",
        track=RankTrack.ENDLESS_VOICE,
        rating=1500.0,
        rating_deviation=120.0,
        volatility=0.06,
        derived_tier=4,
        games_played=10,
        season_highest_rating=1500.0,
    )


@pytest.fixture
def words():
    """Three words per tier, ids like "t4-w0"."""
    return [
        Word(id=f"t{tier}-w{i}", word=f"word{tier}{i}", tier=tier)
        for tier in range(1, 8)
        for i in range(3)
    ]
