"""Pydantic records shared by the scorer, the ranker and the stores.

Profiles are validated once at the boundary (CSV rows, API payloads) and are
immutable afterwards, so the scorer can assume well-formed input.
"""
from __future__ import annotations

from datetime import datetime
from typing import FrozenSet, List, Literal, Optional

import shortuuid
from pydantic import BaseModel, ConfigDict, Field, field_validator


Role = Literal["mentor", "seeker"]

MatchStatus = Literal["pending", "accepted", "rejected"]

TRAITS = ("extrovert", "patient", "humorous", "empathetic")

NEUTRAL_TRAIT = 5.0


class Personality(BaseModel):
    """Four independent traits on a 0-10 scale. ``None`` means not stated."""

    model_config = ConfigDict(frozen=True)

    extrovert: Optional[float] = Field(default=None, ge=0.0, le=10.0)
    patient: Optional[float] = Field(default=None, ge=0.0, le=10.0)
    humorous: Optional[float] = Field(default=None, ge=0.0, le=10.0)
    empathetic: Optional[float] = Field(default=None, ge=0.0, le=10.0)

    def value(self, trait: str) -> float:
        """Trait value with the neutral midpoint substituted when absent."""
        if trait not in TRAITS:
            raise ValueError(f"Unknown personality trait: {trait}")
        raw = getattr(self, trait)
        return NEUTRAL_TRAIT if raw is None else float(raw)


class Profile(BaseModel):
    """
    A user profile as seen by the matcher.

    Only ``role`` is required; everything else degrades to a neutral value
    when scoring.
    """

    model_config = ConfigDict(frozen=True)

    uid: str = Field(default_factory=shortuuid.uuid)
    name: str = ""
    role: Role
    interests: FrozenSet[str] = Field(default_factory=frozenset)
    personality: Personality = Field(default_factory=Personality)
    location: Optional[str] = None
    bio: Optional[str] = None
    age: Optional[int] = Field(default=None, ge=0)

    @field_validator("interests", mode="before")
    @classmethod
    def _clean_interests(cls, v):
        """Trim entries and drop blanks, so " cooking" and "cooking" are one interest.

        After trimming, interests are compared exactly (case-sensitive).
        """
        if v is None:
            return frozenset()
        if isinstance(v, str):
            v = [v]
        return frozenset(str(item).strip() for item in v if str(item).strip())

    @field_validator("location", mode="before")
    @classmethod
    def _blank_location_is_none(cls, v):
        if isinstance(v, str) and not v.strip():
            return None
        return v


class MatchBreakdown(BaseModel):
    """Human-readable explanation kept next to the numeric scores."""

    model_config = ConfigDict(frozen=True)

    common_interests: List[str] = Field(default_factory=list)
    motivation_alignment: str = ""


class MatchResult(BaseModel):
    """Output of one scoring call. All scores are on a 0-10 scale, one decimal."""

    model_config = ConfigDict(frozen=True)

    user_id: Optional[str] = None
    matched_user_id: Optional[str] = None
    compatibility_score: float = Field(ge=0.0, le=10.0)
    interest_score: float = Field(ge=0.0, le=10.0)
    personality_score: float = Field(ge=0.0, le=10.0)
    motivation_score: float = Field(ge=0.0, le=10.0)
    location_score: float = Field(ge=0.0, le=10.0)
    breakdown: MatchBreakdown = Field(default_factory=MatchBreakdown)


class MatchInsights(BaseModel):
    """Structured compatibility analysis returned by the LLM.

    Fields:
        compatibility_insights: Two or three sentences on why the pair fits.
        conversation_starters: Specific topics the pair could discuss.
        potential_challenges: Points both sides should be aware of.
        advice: Short advice for making the connection work.
    """

    compatibility_insights: str
    conversation_starters: List[str] = Field(default_factory=list)
    potential_challenges: List[str] = Field(default_factory=list)
    advice: List[str] = Field(default_factory=list)


class MatchRecord(BaseModel):
    """A persisted match between two users.

    The scores are copied from a ``MatchResult``; ``status`` is owned by the
    accept/reject workflow, never by the scorer.
    """

    id: str = Field(default_factory=shortuuid.uuid)
    user1_id: str
    user2_id: str
    compatibility_score: float = Field(ge=0.0, le=10.0)
    interest_score: float = Field(ge=0.0, le=10.0)
    personality_score: float = Field(ge=0.0, le=10.0)
    motivation_score: float = Field(ge=0.0, le=10.0)
    location_score: float = Field(ge=0.0, le=10.0)
    status: MatchStatus = "pending"
    created_at: datetime = Field(default_factory=datetime.now)
    updated_at: datetime = Field(default_factory=datetime.now)
    ai_analysis: Optional[MatchInsights] = None
    ai_analyzed_at: Optional[datetime] = None

    @classmethod
    def from_result(cls, result: MatchResult, status: MatchStatus = "pending") -> "MatchRecord":
        if not result.user_id or not result.matched_user_id:
            raise ValueError("MatchResult must carry both user ids to be stored")
        return cls(
            user1_id=result.user_id,
            user2_id=result.matched_user_id,
            compatibility_score=result.compatibility_score,
            interest_score=result.interest_score,
            personality_score=result.personality_score,
            motivation_score=result.motivation_score,
            location_score=result.location_score,
            status=status,
        )

    def involves(self, uid: str) -> bool:
        return uid in (self.user1_id, self.user2_id)

    def other_user(self, uid: str) -> str:
        """Id of the counterpart of ``uid`` in this match."""
        if uid == self.user1_id:
            return self.user2_id
        if uid == self.user2_id:
            return self.user1_id
        raise ValueError(f"User {uid} is not part of match {self.id}")
