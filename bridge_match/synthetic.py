"""Generate synthetic profiles for demos and load testing.

No PII and no network: names, interests and traits are drawn from small fixed
pools with a seeded RNG, so the same seed always yields the same profiles.
"""
from __future__ import annotations

from datetime import datetime
from typing import List, Optional

import numpy as np
import shortuuid

from .data_models import TRAITS, Profile

INTEREST_POOL = [
    "cooking",
    "reading",
    "travel",
    "gardening",
    "music",
    "chess",
    "history",
    "technology",
    "painting",
    "hiking",
    "photography",
    "volunteering",
    "languages",
    "woodworking",
    "film",
]

LOCATION_POOL = [
    "Berkeley, CA",
    "Oakland, CA",
    "San Francisco, CA",
    "San Jose, CA",
    "Palo Alto, CA",
]

FIRST_NAMES = ["Alex", "Sam", "Jordan", "Taylor", "Morgan", "Casey", "Riley", "Jamie", "Robin", "Avery"]
LAST_NAMES = ["Lee", "Garcia", "Nguyen", "Smith", "Patel", "Kim", "Lopez", "Chen", "Brown", "Okafor"]


def generate_synthetic_id(rng: np.random.Generator) -> str:
    """Short uuid drawn from the seeded RNG so ids are reproducible too."""
    return "".join(rng.choice(list(shortuuid.get_alphabet()), size=22))


def generate_synthetic_profiles(
    n: int,
    seed: Optional[int] = None,
    mentor_share: float = 0.5,
) -> List[Profile]:
    """
    Draw ``n`` synthetic profiles.

    Args:
        n: Number of profiles.
        seed: RNG seed; identical seeds give identical profiles.
        mentor_share: Probability that a profile is a mentor.

    Returns:
        List of validated ``Profile`` objects.
    """
    if n < 0:
        raise ValueError(f"n must be non-negative, got {n}")
    if not 0.0 <= mentor_share <= 1.0:
        raise ValueError(f"mentor_share must be in [0, 1], got {mentor_share}")

    rng = np.random.default_rng(seed)
    profiles: List[Profile] = []
    for _ in range(n):
        role = "mentor" if rng.random() < mentor_share else "seeker"
        k = int(rng.integers(0, 5))
        interests = rng.choice(INTEREST_POOL, size=k, replace=False).tolist() if k else []
        traits = {t: float(rng.integers(0, 21)) / 2 for t in TRAITS}
        age = int(rng.integers(65, 90)) if role == "mentor" else int(rng.integers(18, 30))
        location = None if rng.random() < 0.2 else str(rng.choice(LOCATION_POOL))
        profiles.append(
            Profile(
                uid=generate_synthetic_id(rng),
                name=f"{rng.choice(FIRST_NAMES)} {rng.choice(LAST_NAMES)}",
                role=role,
                interests=interests,
                personality=traits,
                location=location,
                age=age,
            )
        )
    return profiles


def generate_timestamped_filename(prefix: str, extension: str) -> str:
    """e.g. ``synthetic_profiles_20241220_143022.csv``"""
    timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
    return f"{prefix}_{timestamp}.{extension}"
