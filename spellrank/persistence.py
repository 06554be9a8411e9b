#    _____  _____   ______  _       _       _____             _   _  _  __
#   / ____||  __ \ |  ____|| |     | |     |  __ \     /\    | \ | || |/ /
#  | (___  | |__) || |__   | |     | |     | |__) |   /  \   |  \| || ' /
#   \___ \ |  ___/ |  __|  | |     | |     |  _  /   / /\ \  | . ` ||  <
#   ____) || |     | |____ | |____ | |____ | | \ \  / ____ \ | |\  || . \
#  |_____/ |_|     |______||______||______||_|  \_\/_/    \_\|_| \_||_|\_\
#

# Persistence - Storage of skill ratings, visible ranks and the word pool.

# --------------------------------------------------------------------------
#                                  Functions
# --------------------------------------------------------------------------
# SkillRatingStore.load_skill_rating: Loads (or creates) the hidden rating for a user and track.
# SkillRatingStore.save_skill_rating: Saves a rating if the stored version still matches.
# SkillRatingStore.load_visible_rank: Loads (or creates) the visible rank.
# SkillRatingStore.save_visible_rank: Saves a rank if the stored version still matches.
# SkillRatingStore.load_word_pool: Loads the words of one tier or of all tiers.
# InMemoryStore: Dict-backed store for tests and local tooling.
# MongoStore: motor-backed store.

# --------------------------------------------------------------------------
#                            Variables and others
# --------------------------------------------------------------------------
# logger: Logger instance.

# --------------------------------------------------------------------------
#                                   imports
# --------------------------------------------------------------------------
# abc: Store interface.
# logging: Logging.
# typing: Type hints.
# motor.motor_asyncio: Async MongoDB driver.
# pymongo: Upsert return mode and duplicate-key errors.
# spellrank.models: Persisted types.

from abc import ABC, abstractmethod
import logging
from typing import Dict, Iterable, List, Optional, Tuple

from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo import ReturnDocument
from pymongo.errors import DuplicateKeyError

from spellrank.database import SKILL_RATINGS, VISIBLE_RANKS, WORDS, Database
from spellrank.exceptions import ConcurrencyConflict, InvalidInput
from spellrank.constants import MAX_TIER, MIN_TIER
from spellrank.models.rating import RankTrack, SkillRating, VisibleRank
from spellrank.models.word import Word

logger = logging.getLogger(__name__)


class SkillRatingStore(ABC):
    """
    Storage collaborator for the rating core.

    Saves are compare-and-set on `version`: the caller passes the version it
    loaded, the store writes `expected_version + 1` and raises
    ConcurrencyConflict when the stored row has moved on. Rows are created by
    the loads; saving a row that was never loaded is a conflict too.
    """

    @abstractmethod
    async def load_skill_rating(self, user_id: str, track: RankTrack) -> SkillRating:
        ...

    @abstractmethod
    async def save_skill_rating(self, rating: SkillRating, expected_version: int) -> SkillRating:
        ...

    @abstractmethod
    async def load_visible_rank(self, user_id: str, track: RankTrack) -> VisibleRank:
        ...

    @abstractmethod
    async def save_visible_rank(self, rank: VisibleRank, expected_version: int) -> VisibleRank:
        ...

    @abstractmethod
    async def load_word_pool(self, tier: Optional[int] = None) -> List[Word]:
        ...


def _check_tier(tier: Optional[int]) -> None:
    if tier is not None and not MIN_TIER <= tier <= MAX_TIER:
        raise InvalidInput(f"Word tier must be {MIN_TIER}..{MAX_TIER}, got {tier}")


class InMemoryStore(SkillRatingStore):
    """Dict-backed store. Methods never await, so each call is atomic on the event loop."""

    def __init__(self, words: Iterable[Word] = ()):
        self._ratings: Dict[Tuple[str, str], SkillRating] = {}
        self._ranks: Dict[Tuple[str, str], VisibleRank] = {}
        self._words: List[Word] = list(words)

    async def load_skill_rating(self, user_id: str, track: RankTrack) -> SkillRating:
        key = (user_id, RankTrack(track).value)
        if key not in self._ratings:
            self._ratings[key] = SkillRating.default(user_id, RankTrack(track))
        return self._ratings[key]

    async def save_skill_rating(self, rating: SkillRating, expected_version: int) -> SkillRating:
        key = (rating.user_id, rating.track.value)
        current = self._ratings.get(key)
        actual = current.version if current else None
        if actual != expected_version:
            raise ConcurrencyConflict(rating.user_id, rating.track.value, expected_version, actual)
        saved = rating.model_copy(update={"version": expected_version + 1})
        self._ratings[key] = saved
        return saved

    async def load_visible_rank(self, user_id: str, track: RankTrack) -> VisibleRank:
        key = (user_id, RankTrack(track).value)
        if key not in self._ranks:
            self._ranks[key] = VisibleRank.default(user_id, RankTrack(track))
        return self._ranks[key]

    async def save_visible_rank(self, rank: VisibleRank, expected_version: int) -> VisibleRank:
        key = (rank.user_id, rank.track.value)
        current = self._ranks.get(key)
        actual = current.version if current else None
        if actual != expected_version:
            raise ConcurrencyConflict(rank.user_id, rank.track.value, expected_version, actual)
        saved = rank.model_copy(update={"version": expected_version + 1})
        self._ranks[key] = saved
        return saved

    async def load_word_pool(self, tier: Optional[int] = None) -> List[Word]:
        _check_tier(tier)
        if tier is None:
            return list(self._words)
        return [w for w in self._words if w.tier == tier]


class MongoStore(SkillRatingStore):
    """MongoDB store: one document per (user_id, track) in each collection"""

    def __init__(self, db: Optional[AsyncIOMotorDatabase] = None):
        self._db = db

    @property
    def db(self) -> AsyncIOMotorDatabase:
        return self._db if self._db is not None else Database.get_db()

    async def _load_or_create(self, collection: str, default: dict) -> dict:
        key = {"user_id": default["user_id"], "track": default["track"]}
        try:
            doc = await self.db[collection].find_one_and_update(
                key,
                {"$setOnInsert": default},
                upsert=True,
                projection={"_id": 0},
                return_document=ReturnDocument.AFTER,
            )
        except DuplicateKeyError:
            # Lost an insert race; the winner's row is there now
            doc = await self.db[collection].find_one(key, projection={"_id": 0})
        return doc

    async def _compare_and_set(self, collection: str, doc: dict, expected_version: int) -> dict:
        key = {"user_id": doc["user_id"], "track": doc["track"]}
        doc = {**doc, "version": expected_version + 1}
        # No upsert: rows are created by the loads, so a miss always means a stale version
        result = await self.db[collection].update_one(
            {**key, "version": expected_version},
            {"$set": doc},
        )

        if result.matched_count == 0:
            existing = await self.db[collection].find_one(key, projection={"version": 1})
            actual = existing.get("version") if existing else None
            raise ConcurrencyConflict(doc["user_id"], doc["track"], expected_version, actual)
        return doc

    async def load_skill_rating(self, user_id: str, track: RankTrack) -> SkillRating:
        default = SkillRating.default(user_id, RankTrack(track)).model_dump(mode="json")
        doc = await self._load_or_create(SKILL_RATINGS, default)
        return SkillRating.model_validate(doc)

    async def save_skill_rating(self, rating: SkillRating, expected_version: int) -> SkillRating:
        doc = await self._compare_and_set(
            SKILL_RATINGS, rating.model_dump(mode="json"), expected_version
        )
        logger.debug(f"Saved skill rating {rating.user_id}/{rating.track.value} v{doc['version']}")
        return SkillRating.model_validate(doc)

    async def load_visible_rank(self, user_id: str, track: RankTrack) -> VisibleRank:
        default = VisibleRank.default(user_id, RankTrack(track)).model_dump(mode="json")
        doc = await self._load_or_create(VISIBLE_RANKS, default)
        return VisibleRank.model_validate(doc)

    async def save_visible_rank(self, rank: VisibleRank, expected_version: int) -> VisibleRank:
        doc = await self._compare_and_set(
            VISIBLE_RANKS, rank.model_dump(mode="json"), expected_version
        )
        logger.debug(f"Saved visible rank {rank.user_id}/{rank.track.value} v{doc['version']}")
        return VisibleRank.model_validate(doc)

    async def load_word_pool(self, tier: Optional[int] = None) -> List[Word]:
        _check_tier(tier)
        query = {} if tier is None else {"tier": tier}
        cursor = self.db[WORDS].find(query, projection={"_id": 0})
        docs = await cursor.to_list(length=None)
        return [Word.model_validate(doc) for doc in docs]
