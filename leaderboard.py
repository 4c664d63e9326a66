"""
Leaderboard ranking

A submission is sanitized, checked against the owner of its name, merged
into the (name, difficulty) record with a best-score-wins update, and then
every record outside the tier's top LB_LIMIT is deleted.

The lookup / upsert / purge / read sequence is not a transaction. Two
submissions racing on the same tier may purge from a stale snapshot; the
next accepted submission to that tier brings it back to LB_LIMIT records.
Only the merge itself is atomic (a single update_one).
"""
import logging
import math
import re
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from pymongo import ASCENDING, DESCENDING
from pymongo.collection import Collection
from pymongo.errors import PyMongoError

from errors import ConflictError, InfrastructureError, ValidationError
from schemas import LeaderboardEntry, ScoreRecord, ScoreSubmission

logger = logging.getLogger(__name__)

LB_LIMIT = 10
SCORE_RANGE = (0, 50)
NAME_MIN = 2
NAME_MAX = 20
SOCIAL_MAX = 100
ALLOWED_LEVELS = ("easy", "medium", "hard")
DEFAULT_LEVEL = "medium"
SOCIALS = ("instagram", "x", "facebook")
# Largest integer a double holds exactly, well inside BSON int64
TIME_MAX = 2 ** 53

# Letters (Latin-1 accents included), digits, space, underscore, hyphen
NAME_PATTERN = re.compile(r"[a-zA-Z0-9À-ÿ _-]{%d,%d}" % (NAME_MIN, NAME_MAX))
SCORE_PATTERN = re.compile(r"\s*[+-]?[0-9]+\s*")

RANK_SORT = [("score", DESCENDING), ("time", ASCENDING), ("_id", ASCENDING)]
PUBLIC_FIELDS = {"_id": 0, "name": 1, "score": 1, "memberId": 1, "socials": 1, "time": 1}


# ----------------------
# Sanitizing
# ----------------------
def clean_score(value: Any) -> int:
    if isinstance(value, bool):
        raise ValidationError("invalid_score")
    if isinstance(value, int):
        score = value
    elif isinstance(value, float):
        if not value.is_integer():
            raise ValidationError("invalid_score")
        score = int(value)
    elif isinstance(value, str):
        if not SCORE_PATTERN.fullmatch(value):
            raise ValidationError("invalid_score")
        score = int(value)
    else:
        raise ValidationError("invalid_score")

    low, high = SCORE_RANGE
    if score < low or score > high:
        raise ValidationError("invalid_score")
    return score


def clean_name(value: Any) -> str:
    name = str(value).strip()[:NAME_MAX].strip()
    if not NAME_PATTERN.fullmatch(name):
        raise ValidationError("invalid_name")
    return name


def clean_difficulty(value: Any) -> str:
    if value is None:
        return DEFAULT_LEVEL
    if value not in ALLOWED_LEVELS:
        raise ValidationError("invalid_difficulty")
    return value


def clean_member_id(value: Any) -> str:
    if value is None:
        return ""
    return str(value).strip()[:NAME_MAX].strip()


def clean_socials(value: Any) -> Dict[str, str]:
    if value is None:
        return {}
    if not isinstance(value, dict):
        raise ValidationError("invalid_socials")

    socials = {}
    for key in SOCIALS:
        raw = value.get(key)
        if not isinstance(raw, str):
            continue
        url = raw.replace("<", "").replace(">", "").strip()[:SOCIAL_MAX].strip()
        if url:
            socials[key] = url
    return socials


def clean_time(value: Any):
    if value is None:
        return 0
    if isinstance(value, bool) or not isinstance(value, (int, float, str)):
        raise ValidationError("invalid_time")
    try:
        elapsed = float(value)
    except (OverflowError, ValueError):
        raise ValidationError("invalid_time")

    if not math.isfinite(elapsed) or elapsed < 0 or elapsed > TIME_MAX:
        raise ValidationError("invalid_time")
    return value if isinstance(value, int) else elapsed


def sanitize_submission(submission: ScoreSubmission) -> ScoreRecord:
    """Validate every field of a submission. Raises ValidationError on the first bad one."""
    if submission.name is None or submission.name == "" or submission.score is None:
        raise ValidationError("params_missing")

    return ScoreRecord(
        score=clean_score(submission.score),
        name=clean_name(submission.name),
        difficulty=clean_difficulty(submission.difficulty),
        memberId=clean_member_id(submission.memberId),
        socials=clean_socials(submission.socials),
        time=clean_time(submission.time),
    )


# ----------------------
# Ranking
# ----------------------
def _to_entry(doc: Dict[str, Any]) -> LeaderboardEntry:
    return LeaderboardEntry(
        name=doc["name"],
        score=doc["score"],
        memberId=doc.get("memberId") or "",
        socials=doc.get("socials") or {},
        time=doc.get("time") or 0,
    )


def _read_top(collection: Collection, difficulty: str) -> List[LeaderboardEntry]:
    docs = collection.find({"difficulty": difficulty}, PUBLIC_FIELDS).sort(RANK_SORT).limit(LB_LIMIT)
    return [_to_entry(d) for d in docs]


def _purge_tier(collection: Collection, difficulty: str) -> int:
    survivors = collection.find({"difficulty": difficulty}, {"_id": 1}).sort(RANK_SORT).limit(LB_LIMIT)
    survivor_ids = [d["_id"] for d in survivors]
    if not survivor_ids:
        return 0
    result = collection.delete_many({"difficulty": difficulty, "_id": {"$nin": survivor_ids}})
    return result.deleted_count


def submit_score(collection: Collection, submission: ScoreSubmission) -> List[LeaderboardEntry]:
    """
    Merge a submission into its tier and return the tier's ranked top LB_LIMIT.

    Raises ValidationError or ConflictError before any write, and
    InfrastructureError when the store fails (no retry).
    """
    record = sanitize_submission(submission)

    try:
        owner = collection.find_one({"name": record.name}, {"memberId": 1})
        if owner is not None and (owner.get("memberId") or "") != record.memberId:
            logger.warning("Name %r already held by another member", record.name)
            raise ConflictError("name_taken")

        now = datetime.now(timezone.utc)
        collection.update_one(
            {"name": record.name, "difficulty": record.difficulty},
            {
                "$max": {"score": record.score},
                "$set": {
                    "memberId": record.memberId,
                    "socials": record.socials,
                    "time": record.time,
                    "updatedAt": now,
                },
                "$setOnInsert": {"createdAt": now},
            },
            upsert=True,
        )

        purged = _purge_tier(collection, record.difficulty)
        if purged:
            logger.debug("Purged %d record(s) from %s tier", purged, record.difficulty)

        top = _read_top(collection, record.difficulty)
    except PyMongoError as e:
        logger.error("Score save failed: %s", e)
        raise InfrastructureError("server_error") from e

    logger.info("Score %d saved for %r (%s)", record.score, record.name, record.difficulty)
    return top


def get_top(collection: Collection, difficulty: Optional[Any] = None) -> List[LeaderboardEntry]:
    level = clean_difficulty(difficulty)
    try:
        return _read_top(collection, level)
    except PyMongoError as e:
        logger.error("Leaderboard read failed: %s", e)
        raise InfrastructureError("server_error") from e
