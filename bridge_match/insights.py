"""AI compatibility analysis for a stored match.

The score explains *how much* two people fit; this module asks an LLM *why*,
and for conversation starters the pair can use in their first chat.
"""
from __future__ import annotations

import json
import logging
import time
from datetime import datetime
from typing import Any, Optional

from .config import Settings
from .data_models import TRAITS, MatchInsights, MatchRecord, Profile
from .store import MatchRepository, ProfileStore

logger = logging.getLogger(__name__)

SYSTEM_PROMPT = (
    "You are an expert relationship counselor analyzing compatibility between two people "
    "for an intergenerational mentorship and friendship platform that pairs older adults "
    "(mentors) with students (seekers). "
    "Ground every point in the profiles you are given: shared interests, bios, roles and "
    "personality traits. Do not invent facts that are not in the profiles. "
    "Respond ONLY with the structured fields defined by the schema."
)


def _describe(label: str, profile: Profile) -> str:
    traits = ", ".join(
        f"{trait.capitalize()} {profile.personality.value(trait):g}/10" for trait in TRAITS
    )
    age = profile.age if profile.age is not None else "N/A"
    return (
        f"{label}: {profile.name or 'Unnamed'}, {age} years old, {profile.role}\n"
        f"Interests: {', '.join(sorted(profile.interests)) or 'None listed'}\n"
        f"Bio: {profile.bio or 'No bio'}\n"
        f"Personality: {traits}"
    )


def build_match_prompt(a: Profile, b: Profile) -> str:
    """Render the user prompt describing both sides of a match."""
    return (
        "Analyze the compatibility between these two users:\n\n"
        f"{_describe('User 1', a)}\n\n"
        f"{_describe('User 2', b)}\n\n"
        "Provide:\n"
        "1. Compatibility insights (2-3 sentences about why they're a good match)\n"
        "2. Conversation starters (3 specific topics they could discuss)\n"
        "3. Potential challenges (1-2 points to be aware of)\n"
        "4. Advice (1-2 sentences for each user on making the connection successful)"
    )


def request_match_insights(
    a: Profile,
    b: Profile,
    client: Any = None,
    model: Optional[str] = None,
    max_retries: int = 2,
) -> Optional[MatchInsights]:
    """Ask the OpenAI Responses API for a structured analysis of a pair.

    Args:
        a: First profile of the match.
        b: Second profile of the match.
        client: An ``openai.OpenAI`` compatible client; created on demand when omitted.
        model: Model name; defaults to env ``OPENAI_MODEL`` or ``gpt-5-mini``.
        max_retries: Number of attempts before giving up.

    Returns:
        Parsed ``MatchInsights``, or ``None`` if every attempt failed.
    """
    chosen_model = model or Settings.from_env().openai_model

    if client is None:
        from openai import OpenAI

        try:
            client = OpenAI()
        except Exception as e:
            logger.warning("OpenAI client init failed (%s); no insights generated", e)
            return None

    messages: Any = [
        {"role": "system", "content": SYSTEM_PROMPT},
        {"role": "user", "content": build_match_prompt(a, b)},
    ]

    for attempt in range(1, max_retries + 1):
        try:
            parsed = client.responses.parse(  # type: ignore[call-arg]
                model=str(chosen_model),
                input=messages,
                text_format=MatchInsights,  # type: ignore[arg-type]
            )
            if getattr(parsed, "output_parsed", None) is None:
                raise ValueError("Structured parse returned None")
            insights = parsed.output_parsed
            if not isinstance(insights, MatchInsights):
                insights = MatchInsights.model_validate(insights)
            return insights
        except Exception as e:
            logger.warning(
                "Match insights attempt %d/%d failed: %s", attempt, max_retries, e
            )
            if attempt < max_retries:
                time.sleep(0.8 * attempt)
    return None


def enhance_match(
    match_id: str,
    profiles: ProfileStore,
    matches: MatchRepository,
    client: Any = None,
    model: Optional[str] = None,
) -> MatchRecord:
    """Attach AI insights to a stored match and return the updated record.

    Raises:
        MatchNotFoundError: If the match does not exist.
        ProfileNotFoundError: If either participant's profile is gone.
        RuntimeError: If the model produced no usable analysis.
    """
    record = matches.get(match_id)
    a = profiles.get(record.user1_id)
    b = profiles.get(record.user2_id)

    insights = request_match_insights(a, b, client=client, model=model)
    if insights is None:
        raise RuntimeError(f"Could not generate AI insights for match {match_id}")

    updated = matches.update(
        record.model_copy(update={"ai_analysis": insights, "ai_analyzed_at": datetime.now()})
    )
    logger.info("Stored AI insights for match %s", match_id)
    return updated


def insights_as_json(insights: MatchInsights) -> str:
    return json.dumps(insights.model_dump(), ensure_ascii=False, indent=2)
