#    _____  _____   ______  _       _       _____             _   _  _  __
#   / ____||  __ \ |  ____|| |     | |     |  __ \     /\    | \ | || |/ /
#  | (___  | |__) || |__   | |     | |     | |__) |   /  \   |  \| || ' /
#   \___ \ |  ___/ |  __|  | |     | |     |  _  /   / /\ \  | . ` ||  <
#   ____) || |     | |____ | |____ | |____ | | \ \  / ____ \ | |\  || . \
#  |_____/ |_|     |______||______||______||_|  \_\/_/    \_\|_| \_||_|\_\
#

# Database - MongoDB connection management and indexing for the rating store.

# --------------------------------------------------------------------------
#                                  Functions
# --------------------------------------------------------------------------
# Database.connect: Establishes connection to MongoDB.
# Database.disconnect: Closes connection.
# Database._create_indexes: Creates required indexes for collections.
# Database.check_health: Checks database connectivity.
# Database.get_db: Returns the database instance.

# --------------------------------------------------------------------------
#                            Variables and others
# --------------------------------------------------------------------------
# logger: Logger instance.
# Database: Static class managing the MongoDB client and database connection.
# SKILL_RATINGS, VISIBLE_RANKS, WORDS: Collection names.

# --------------------------------------------------------------------------
#                                   imports
# --------------------------------------------------------------------------
# motor.motor_asyncio: Async MongoDB driver.
# pymongo.errors: Driver error types.
# typing: Type hints.
# logging: Logging.
# spellrank.config.get_settings: Settings.

from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorDatabase
from pymongo.errors import PyMongoError
from typing import Optional
import logging

from spellrank.config import get_settings
from spellrank.constants import MONGODB_SERVER_SELECTION_TIMEOUT_MS

logger = logging.getLogger(__name__)

SKILL_RATINGS = "skill_ratings"
VISIBLE_RANKS = "visible_ranks"
WORDS = "words"


class Database:
    """MongoDB database connection manager"""

    client: Optional[AsyncIOMotorClient] = None
    db: Optional[AsyncIOMotorDatabase] = None

    @classmethod
    async def connect(cls, uri: Optional[str] = None, database: Optional[str] = None) -> None:
        """Establish connection to MongoDB"""
        settings = get_settings()
        uri = uri or settings.mongodb_uri
        database = database or settings.mongodb_database
        try:
            cls.client = AsyncIOMotorClient(
                uri,
                serverSelectionTimeoutMS=MONGODB_SERVER_SELECTION_TIMEOUT_MS,
            )
            cls.db = cls.client[database]

            # Verify connection
            await cls.client.admin.command('ping')
            logger.info(f"Connected to MongoDB: {database}")

            await cls._create_indexes()

        except PyMongoError as e:
            logger.error(f"Failed to connect to MongoDB: {e}")
            raise

    @classmethod
    async def disconnect(cls) -> None:
        """Close MongoDB connection"""
        if cls.client:
            cls.client.close()
            cls.client = None
            cls.db = None
            logger.info("Disconnected from MongoDB")

    @classmethod
    async def _create_indexes(cls) -> None:
        """Create necessary indexes for collections"""
        if cls.db is None:
            return

        # One row per (user, track); the version filter on saves relies on it
        await cls.db[SKILL_RATINGS].create_index(
            [("user_id", 1), ("track", 1)],
            unique=True
        )
        await cls.db[VISIBLE_RANKS].create_index(
            [("user_id", 1), ("track", 1)],
            unique=True
        )
        # Leaderboard-style lookups by visible XP
        await cls.db[VISIBLE_RANKS].create_index([("track", 1), ("xp", -1)])

        await cls.db[WORDS].create_index("id", unique=True)
        await cls.db[WORDS].create_index("tier")

        logger.info("Database indexes created")

    @classmethod
    async def check_health(cls) -> bool:
        """Check if database connection is alive"""
        if cls.client is None:
            return False
        try:
            await cls.client.admin.command('ping')
            return True
        except PyMongoError as e:
            logger.warning(f"Database health check failed: {e}")
            return False

    @classmethod
    def get_db(cls) -> AsyncIOMotorDatabase:
        """Get database instance"""
        if cls.db is None:
            raise RuntimeError("Database not connected. Call Database.connect() first.")
        return cls.db
