"""
Match generation and the pending/accepted/rejected workflow.

It will be responsible for:

- Ranking every other profile against the requesting user
- Persisting results at or above the threshold as pending matches
    - Pairs that are already stored are reused, not written again
- Returning the best n matches for display
- Moving pending matches to accepted or rejected

Scoring itself lives in ``scorer``; this module only wires the ranker to the stores.
"""
from __future__ import annotations

import logging
from typing import Callable, Dict, List, Optional

from .data_models import MatchRecord, MatchStatus
from .ranker import DEFAULT_THRESHOLD, DEFAULT_TOP_N, rank
from .scorer import ScoreWeights
from .store import MatchRepository, ProfileStore

logger = logging.getLogger(__name__)

ProgressFn = Callable[[int, int, str], None]


def generate_matches(
    user_id: str,
    profiles: ProfileStore,
    matches: MatchRepository,
    threshold: float = DEFAULT_THRESHOLD,
    top_n: int = DEFAULT_TOP_N,
    weights: Optional[ScoreWeights] = None,
) -> List[MatchRecord]:
    """Generate and store matches for one user.

    Args:
        user_id: The requesting user's uid.
        profiles: Source of the subject and all candidate profiles.
        matches: Repository the pending matches are written to.
        threshold: Minimum compatibility score for a match to be stored.
        top_n: How many of the stored matches to return.
        weights: Optional scorer weights.

    Returns:
        Up to ``top_n`` match records involving ``user_id``, compatibility descending.

    Raises:
        ProfileNotFoundError: If ``user_id`` has no profile.
    """
    subject = profiles.get(user_id)
    results = rank(subject, profiles.all(), threshold=threshold, top_n=None, weights=weights)

    records: List[MatchRecord] = []
    created = 0
    for result in results:
        existing = matches.find_pair(user_id, result.matched_user_id)
        if existing is not None:
            records.append(existing)
            continue
        records.append(matches.add(MatchRecord.from_result(result)))
        created += 1

    logger.info(
        "Generated matches for %s: %d above threshold, %d new", user_id, len(records), created
    )
    records.sort(key=lambda r: r.compatibility_score, reverse=True)
    return records[:top_n]


def generate_all_matches(
    profiles: ProfileStore,
    matches: MatchRepository,
    threshold: float = DEFAULT_THRESHOLD,
    top_n: int = DEFAULT_TOP_N,
    weights: Optional[ScoreWeights] = None,
    progress_fn: Optional[ProgressFn] = None,
) -> Dict[str, List[MatchRecord]]:
    """Run ``generate_matches`` for every profile in the store.

    Because stored pairs are reused, each pair is written once whichever side
    generates it first. ``progress_fn(done, total, uid)`` is called after each user.
    """
    everyone = profiles.all()
    total = len(everyone)
    out: Dict[str, List[MatchRecord]] = {}
    for done, subject in enumerate(everyone, start=1):
        out[subject.uid] = generate_matches(
            subject.uid, profiles, matches, threshold=threshold, top_n=top_n, weights=weights
        )
        if progress_fn is not None:
            try:
                progress_fn(done, total, subject.uid)
            except Exception:
                # Progress reporting must not break the batch
                logger.exception("Progress callback failed for %s", subject.uid)
    return out


def list_user_matches(user_id: str, matches: MatchRepository) -> List[MatchRecord]:
    """Stored matches involving ``user_id`` in either position, best first."""
    return matches.for_user(user_id)


def respond_to_match(match_id: str, status: MatchStatus, matches: MatchRepository) -> MatchRecord:
    """Accept or reject a pending match.

    Raises:
        MatchNotFoundError: If the match does not exist.
        ValueError: If the match is no longer pending or ``status`` is not a response.
    """
    if status not in ("accepted", "rejected"):
        raise ValueError(f"A match can only be accepted or rejected, got {status!r}")
    record = matches.get(match_id)
    if record.status != "pending":
        raise ValueError(f"Match {match_id} is already {record.status}")
    updated = matches.update(record.model_copy(update={"status": status}))
    logger.info("Match %s marked %s", match_id, status)
    return updated
