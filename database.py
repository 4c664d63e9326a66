"""
MongoDB access for the leaderboard

One MongoClient is created lazily and reused by every request of the process.
The server selection timeout is kept short so an unreachable store fails the
request quickly instead of hanging it.
"""
import logging
import os
import threading
from typing import Optional

from pymongo import ASCENDING, DESCENDING, MongoClient
from pymongo.collection import Collection
from pymongo.database import Database
from pymongo.errors import PyMongoError

from errors import InfrastructureError

logger = logging.getLogger(__name__)

DEFAULT_DATABASE_NAME = "norml_trvknn"
SCORES_COLLECTION = "leaderboard"
DEFAULT_TIMEOUT_MS = 500

_client: Optional[MongoClient] = None
_client_lock = threading.Lock()


def resolve_database_url() -> Optional[str]:
    use_local = os.getenv("USE_LOCAL_DB", "false").lower() == "true"
    is_prod = os.getenv("APP_ENV", "development") == "production"
    if use_local and not is_prod:
        return os.getenv("DATABASE_LOCAL_URL")
    return os.getenv("DATABASE_URL")


def database_name() -> str:
    return os.getenv("DATABASE_NAME", DEFAULT_DATABASE_NAME)


def get_client() -> MongoClient:
    global _client
    if _client is not None:
        return _client
    with _client_lock:
        if _client is not None:
            return _client
        url = resolve_database_url()
        if not url:
            raise InfrastructureError("db_client_missing")
        timeout = int(os.getenv("DATABASE_TIMEOUT_MS", DEFAULT_TIMEOUT_MS))
        try:
            _client = MongoClient(
                url,
                serverSelectionTimeoutMS=timeout,
                connectTimeoutMS=timeout,
            )
        except PyMongoError as e:
            logger.error("Could not create MongoDB client: %s", e)
            raise InfrastructureError("db_client_missing") from e
        logger.info("MongoDB client created for database %s", database_name())
    return _client


def close_client() -> None:
    global _client
    with _client_lock:
        if _client is not None:
            _client.close()
            _client = None
            logger.info("MongoDB client closed")


def get_db() -> Database:
    return get_client()[database_name()]


def get_collection(name: str) -> Collection:
    return get_db()[name]


def get_scores_collection() -> Collection:
    """FastAPI dependency returning the leaderboard collection."""
    return get_collection(SCORES_COLLECTION)


def ensure_indexes(collection: Collection) -> bool:
    """
    Create the leaderboard indexes. Returns False instead of raising when the
    store is not reachable, so the app can start without it.
    """
    try:
        collection.create_index(
            [("name", ASCENDING), ("difficulty", ASCENDING)], unique=True
        )
        collection.create_index(
            [("difficulty", ASCENDING), ("score", DESCENDING), ("time", ASCENDING)]
        )
    except PyMongoError as e:
        logger.error("Could not create leaderboard indexes: %s", e)
        return False
    return True
