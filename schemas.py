"""
Database Schemas for the trivia leaderboard

Each Pydantic model that is stored represents a MongoDB collection (the
collection name is given in its docstring).
"""
from datetime import datetime
from typing import Any, Dict, Optional, Union

from pydantic import BaseModel, Field


class ScoreRecord(BaseModel):
    """
    One player's best result for one difficulty tier
    Collection: "leaderboard"
    """
    name: str = Field(..., min_length=2, max_length=20)
    difficulty: str = Field("medium", description="easy | medium | hard")
    score: int = Field(..., ge=0, le=50)
    memberId: str = Field("", max_length=20, description="Disambiguates same-name players")
    socials: Dict[str, str] = Field(default_factory=dict)
    time: Union[int, float] = Field(0, description="Elapsed time, lower is better")
    createdAt: Optional[datetime] = Field(None, description="Set on first insert only")
    updatedAt: Optional[datetime] = None


class ScoreSubmission(BaseModel):
    """
    Body of POST /score

    Types are left open on purpose: the leaderboard sanitizes each field and
    reports a dedicated error for each kind of bad value.
    """
    name: Optional[Any] = None
    score: Optional[Any] = None
    memberId: Optional[Any] = None
    socials: Optional[Any] = None
    difficulty: Optional[Any] = None
    time: Optional[Any] = None


class LeaderboardEntry(BaseModel):
    name: str
    score: int
    memberId: str = ""
    socials: Dict[str, str] = Field(default_factory=dict)
    time: Union[int, float] = 0
