from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional, Sequence, Tuple

import numpy as np
from sklearn.feature_extraction.text import TfidfVectorizer
from sklearn.metrics.pairwise import cosine_similarity

from .data_models import Profile

logger = logging.getLogger(__name__)


def _profile_text(p: Profile) -> str:
    parts = [p.name, p.role, p.bio or "", " ".join(sorted(p.interests)), p.location or ""]
    return " | ".join(part for part in parts if part).replace("\n", " ").strip()


def _passes_filters(p: Profile, filters: Optional[Dict[str, Any]]) -> bool:
    """Exact match per field; ``interests`` matches when any listed interest is shared."""
    if not filters:
        return True
    for field, expected in filters.items():
        if not hasattr(p, field):
            raise ValueError(f"Unknown profile field in filter: {field}")
        if field == "interests":
            wanted = {expected} if isinstance(expected, str) else set(expected)
            if wanted and not (p.interests & wanted):
                return False
        elif getattr(p, field) != expected:
            return False
    return True


def search_profiles(
    profiles: Sequence[Profile],
    query: Optional[str] = None,
    filters: Optional[Dict[str, Any]] = None,
    limit: int = 20,
) -> List[Tuple[Profile, float]]:
    """Free-text search over name, role, bio, interests and location.

    Character n-gram TF-IDF gives tolerance for small typos ("cookng" still
    finds "cooking"). ``filters`` are exact-match terms on profile fields,
    e.g. ``{"role": "mentor"}``; ``{"interests": [...]}`` keeps profiles
    sharing at least one of the listed interests.

    Without a query the filtered profiles are returned in store order with a
    similarity of 0.0.

    Returns:
        (profile, similarity) pairs, best first.

    Raises:
        ValueError: If neither a query nor any filter is given.
    """
    query = (query or "").strip()
    if not query and not filters:
        raise ValueError("At least one search parameter is required")

    pool = [p for p in profiles if _passes_filters(p, filters)]
    if not pool:
        return []
    if not query:
        return [(p, 0.0) for p in pool[:limit]]

    vec = TfidfVectorizer(analyzer="char_wb", ngram_range=(3, 4), lowercase=True)
    doc_mat = vec.fit_transform([_profile_text(p) for p in pool])
    query_vec = vec.transform([query])
    sims = cosine_similarity(query_vec, doc_mat).ravel()

    order = np.argsort(-sims, kind="stable")
    hits = [(pool[i], float(sims[i])) for i in order if sims[i] > 0][:limit]
    logger.debug("Search %r matched %d of %d profiles", query, len(hits), len(pool))
    return hits
