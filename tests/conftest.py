"""
Pytest configuration and shared fixtures.
"""

from types import SimpleNamespace
from typing import List

import pytest

from bridge_match.data_models import MatchInsights, Profile
from bridge_match.store import InMemoryMatchRepository, InMemoryProfileStore


# ============================================================================
# Mock Services
# ============================================================================

class FakeResponses:
    """Stands in for ``client.responses``; returns ``output_parsed`` or raises."""

    def __init__(self, parsed=None, failures: int = 0):
        self.parsed = parsed
        self.failures = failures
        self.calls: List[dict] = []

    def parse(self, **kwargs):
        self.calls.append(kwargs)
        if self.failures > 0:
            self.failures -= 1
            raise RuntimeError("Mock LLM failure")
        return SimpleNamespace(output_parsed=self.parsed)


class FakeOpenAIClient:
    def __init__(self, parsed=None, failures: int = 0):
        self.responses = FakeResponses(parsed=parsed, failures=failures)


@pytest.fixture
def sample_insights() -> MatchInsights:
    return MatchInsights(
        compatibility_insights="Both love cooking and live in Berkeley.",
        conversation_starters=["Favourite family recipe", "Berkeley farmers market", "Travel plans"],
        potential_challenges=["Different energy levels"],
        advice=["Start with a shared meal.", "Be patient with each other."],
    )


@pytest.fixture
def llm_factory():
    """Build a fake client with custom output or a number of failing calls."""
    return FakeOpenAIClient


@pytest.fixture
def fake_llm(sample_insights) -> FakeOpenAIClient:
    return FakeOpenAIClient(parsed=sample_insights)


# ============================================================================
# Profile Fixtures
# ============================================================================

@pytest.fixture
def mentor() -> Profile:
    """Mentor from the reference scenario."""
    return Profile(
        uid="m1",
        name="Margaret",
        role="mentor",
        interests=["cooking", "reading"],
        personality={"extrovert": 8, "patient": 8, "humorous": 8, "empathetic": 8},
        location="Berkeley, CA",
        bio="Retired teacher who loves to cook.",
        age=72,
    )


@pytest.fixture
def seeker() -> Profile:
    """Seeker from the reference scenario."""
    return Profile(
        uid="s1",
        name="Diego",
        role="seeker",
        interests=["cooking", "travel"],
        personality={"extrovert": 2, "patient": 2, "humorous": 2, "empathetic": 2},
        location="Berkeley, CA",
        bio="Student looking for a cooking buddy.",
        age=20,
    )


@pytest.fixture
def population(mentor, seeker) -> List[Profile]:
    """A small mixed pool with one low-scoring outlier."""
    return [
        mentor,
        seeker,
        Profile(
            uid="s2",
            name="Priya",
            role="seeker",
            interests=["cooking", "reading"],
            personality={"extrovert": 8, "patient": 8, "humorous": 8, "empathetic": 8},
            location="Berkeley, CA",
        ),
        Profile(
            uid="m2",
            name="Harold",
            role="mentor",
            interests=["chess"],
            personality={"extrovert": 0, "patient": 0, "humorous": 0, "empathetic": 0},
            location="Oakland, CA",
        ),
        Profile(uid="s3", name="Kim", role="seeker"),
    ]


@pytest.fixture
def profile_store(population) -> InMemoryProfileStore:
    return InMemoryProfileStore(population)


@pytest.fixture
def match_repo() -> InMemoryMatchRepository:
    return InMemoryMatchRepository()


@pytest.fixture
def profiles_csv(tmp_path, population):
    """The population written to a CSV in the on-disk format."""
    from bridge_match.ingest import profiles_to_frame

    path = tmp_path / "profiles.csv"
    profiles_to_frame(population).to_csv(path, index=False)
    return path
