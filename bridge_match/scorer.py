"""Compatibility scoring between two profiles.

Four components on a 0-10 scale, combined as a weighted sum:

- interests (0.4): Jaccard overlap of interest sets, neutral 5 if either side is empty
- personality (0.3): 10 minus the mean absolute trait difference
- motivation (0.2): 10 for a mentor/seeker pairing, otherwise 5
- location (0.1): 10 for identical non-empty location strings, otherwise 5

Every function here is pure and safe to call from many threads at once.
"""
from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Optional

from .data_models import TRAITS, MatchBreakdown, MatchResult, Profile

MAX_SCORE = 10.0
NEUTRAL_SCORE = 5.0


@dataclass(frozen=True)
class ScoreWeights:
    w_interest: float = 0.4
    w_personality: float = 0.3
    w_motivation: float = 0.2
    w_location: float = 0.1


def round_score(value: float) -> float:
    """Round to one decimal, halves away from zero."""
    return math.copysign(math.floor(abs(value) * 10 + 0.5) / 10, value)


def interest_score(a: Profile, b: Profile) -> float:
    if not a.interests or not b.interests:
        return NEUTRAL_SCORE
    union = a.interests | b.interests
    jaccard = len(a.interests & b.interests) / len(union)
    return round_score(jaccard * MAX_SCORE)


def personality_score(a: Profile, b: Profile) -> float:
    total_diff = sum(
        abs(a.personality.value(trait) - b.personality.value(trait)) for trait in TRAITS
    )
    avg_diff = total_diff / len(TRAITS)
    return max(0.0, round_score(MAX_SCORE - avg_diff))


def motivation_score(a: Profile, b: Profile) -> float:
    if a.role != b.role and "mentor" in (a.role, b.role):
        return MAX_SCORE
    return NEUTRAL_SCORE


def location_score(a: Profile, b: Profile) -> float:
    if a.location and b.location and a.location == b.location:
        return MAX_SCORE
    return NEUTRAL_SCORE


def _motivation_alignment(a: Profile, b: Profile) -> str:
    if a.role == "mentor" and b.role == "seeker":
        return "Perfect mentor-mentee match"
    if a.role == "seeker" and b.role == "mentor":
        return "Great learning opportunity"
    return "Peer connection"


def explain_match(a: Profile, b: Profile) -> MatchBreakdown:
    """Shared interests and role alignment, as seen from ``a``."""
    return MatchBreakdown(
        common_interests=sorted(a.interests & b.interests),
        motivation_alignment=_motivation_alignment(a, b),
    )


def score_profiles(a: Profile, b: Profile, weights: Optional[ScoreWeights] = None) -> MatchResult:
    """
    Score ``b`` as a match for ``a``.

    The numeric result is symmetric in ``a`` and ``b``; only the breakdown's
    motivation wording depends on the direction.

    Args:
        a: The querying profile.
        b: The candidate profile.
        weights: Component weights; defaults to 0.4/0.3/0.2/0.1.

    Returns:
        MatchResult with the total and the four component scores, each rounded
        to one decimal.
    """
    if weights is None:
        weights = ScoreWeights()

    interests = interest_score(a, b)
    personality = personality_score(a, b)
    motivation = motivation_score(a, b)
    location = location_score(a, b)

    total = (
        weights.w_interest * interests
        + weights.w_personality * personality
        + weights.w_motivation * motivation
        + weights.w_location * location
    )

    return MatchResult(
        user_id=a.uid,
        matched_user_id=b.uid,
        compatibility_score=min(MAX_SCORE, max(0.0, round_score(total))),
        interest_score=interests,
        personality_score=personality,
        motivation_score=motivation,
        location_score=location,
        breakdown=explain_match(a, b),
    )
