"""
Tests for candidate ranking.
"""

import logging

import pytest

from bridge_match.data_models import Profile
from bridge_match.ranker import rank


class TestRank:
    """Filtering, ordering and truncation."""

    def test_population_order(self, mentor, population):
        results = rank(mentor, population)

        assert [r.matched_user_id for r in results] == ["s2", "s3", "s1"]
        assert [r.compatibility_score for r in results] == [10.0, 6.6, 5.5]

    def test_skips_subject(self, mentor, population):
        results = rank(mentor, population, threshold=0.0)
        assert all(r.matched_user_id != mentor.uid for r in results)
        assert len(results) == len(population) - 1

    def test_threshold_is_inclusive(self, mentor, population):
        results = rank(mentor, population, threshold=5.5)
        assert [r.matched_user_id for r in results] == ["s2", "s3", "s1"]

    def test_threshold_excludes_low_scores(self, mentor, population):
        results = rank(mentor, population, threshold=7.0)
        assert [r.matched_user_id for r in results] == ["s2"]

    def test_empty_pool(self, mentor):
        assert rank(mentor, []) == []

    def test_top_n_none_keeps_everything(self, mentor, population):
        assert len(rank(mentor, population, threshold=0.0, top_n=None)) == 4

    def test_negative_top_n_rejected(self, mentor, population):
        with pytest.raises(ValueError):
            rank(mentor, population, top_n=-1)

    def test_debug_log(self, mentor, population, caplog):
        with caplog.at_level(logging.DEBUG, logger="bridge_match.ranker"):
            rank(mentor, population)
        assert "Ranked 4 candidates for m1" in caplog.text


class TestLargePool:
    """Fifteen candidates trimmed to the default ten."""

    @pytest.fixture
    def candidates(self):
        pool = []
        for i in range(15):
            # overlap drops every five candidates: 10.0, 8.7, 7.3
            shared = ["cooking", "reading", "travel"][: 3 - (i // 5)]
            pool.append(
                Profile(
                    uid=f"c{i:02d}",
                    role="seeker",
                    interests=shared or ["film"],
                    location="Berkeley, CA",
                )
            )
        return pool

    def test_default_top_ten(self, candidates):
        subject = Profile(uid="me", role="mentor", interests=["cooking", "reading", "travel"], location="Berkeley, CA")

        results = rank(subject, candidates)

        assert len(results) == 10
        scores = [r.compatibility_score for r in results]
        assert scores == sorted(scores, reverse=True)

    def test_ties_keep_input_order(self, candidates):
        subject = Profile(uid="me", role="mentor", interests=["cooking", "reading", "travel"], location="Berkeley, CA")

        results = rank(subject, candidates)

        assert [r.matched_user_id for r in results] == [f"c{i:02d}" for i in range(10)]
