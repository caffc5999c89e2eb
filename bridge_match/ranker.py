"""Select the best matches for one profile out of a candidate pool."""
from __future__ import annotations

import logging
from typing import Iterable, List, Optional

from .data_models import MatchResult, Profile
from .scorer import ScoreWeights, score_profiles

logger = logging.getLogger(__name__)

DEFAULT_THRESHOLD = 5.0
DEFAULT_TOP_N = 10


def rank(
    subject: Profile,
    candidates: Iterable[Profile],
    threshold: float = DEFAULT_THRESHOLD,
    top_n: Optional[int] = DEFAULT_TOP_N,
    weights: Optional[ScoreWeights] = None,
) -> List[MatchResult]:
    """Return the top-n candidates for ``subject`` at or above ``threshold``.

    Pseudocode:
    1. Skip any candidate with the subject's uid.
    2. Score the rest against the subject.
    3. Keep results with compatibility_score >= threshold.
    4. Sort descending by compatibility_score. The sort is stable, so ties keep
       the candidates' input order.
    5. Truncate to top_n (``None`` keeps everything).
    """
    if top_n is not None and top_n < 0:
        raise ValueError(f"top_n must be non-negative, got {top_n}")

    scored: List[MatchResult] = []
    considered = 0
    for candidate in candidates:
        if candidate.uid == subject.uid:
            continue
        considered += 1
        result = score_profiles(subject, candidate, weights)
        if result.compatibility_score >= threshold:
            scored.append(result)

    scored.sort(key=lambda r: r.compatibility_score, reverse=True)
    if top_n is not None:
        scored = scored[:top_n]

    logger.debug(
        "Ranked %d candidates for %s: %d kept (threshold=%.1f)",
        considered,
        subject.uid,
        len(scored),
        threshold,
    )
    return scored
