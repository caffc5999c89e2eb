"""Bridge: compatibility matching between mentors (older adults) and seekers (students)."""

from .data_models import MatchInsights, MatchRecord, MatchResult, Personality, Profile
from .ranker import rank
from .scorer import ScoreWeights, score_profiles

__version__ = "0.1.0"

__all__ = [
    "Profile",
    "Personality",
    "MatchResult",
    "MatchRecord",
    "MatchInsights",
    "ScoreWeights",
    "score_profiles",
    "rank",
]
