"""
Tests for match generation and the response workflow.
"""

import pytest

from bridge_match.matcher import (
    generate_all_matches,
    generate_matches,
    list_user_matches,
    respond_to_match,
)
from bridge_match.store import MatchNotFoundError, ProfileNotFoundError


class TestGenerateMatches:
    """Single-user generation."""

    def test_stores_pending_matches(self, profile_store, match_repo):
        records = generate_matches("m1", profile_store, match_repo)

        assert [r.other_user("m1") for r in records] == ["s2", "s3", "s1"]
        assert all(r.status == "pending" for r in records)
        assert all(r.user1_id == "m1" for r in records)
        assert len(match_repo) == 3

    def test_top_n_limits_return_not_storage(self, profile_store, match_repo):
        records = generate_matches("m1", profile_store, match_repo, top_n=1)
        assert len(records) == 1
        assert records[0].compatibility_score == 10.0
        assert len(match_repo) == 3

    def test_rerun_reuses_pairs(self, profile_store, match_repo):
        first = generate_matches("m1", profile_store, match_repo)
        second = generate_matches("m1", profile_store, match_repo)
        assert [r.id for r in first] == [r.id for r in second]
        assert len(match_repo) == 3

    def test_counterpart_reuses_pair(self, profile_store, match_repo):
        generate_matches("m1", profile_store, match_repo)
        records = generate_matches("s1", profile_store, match_repo)

        existing = match_repo.find_pair("m1", "s1")
        assert existing.id in [r.id for r in records]
        # s1 adds only its match with s3
        assert len(match_repo) == 4

    def test_threshold(self, profile_store, match_repo):
        records = generate_matches("m1", profile_store, match_repo, threshold=8.0)
        assert [r.other_user("m1") for r in records] == ["s2"]

    def test_unknown_user(self, profile_store, match_repo):
        with pytest.raises(ProfileNotFoundError):
            generate_matches("ghost", profile_store, match_repo)


class TestGenerateAllMatches:
    def test_every_pair_once(self, profile_store, match_repo):
        out = generate_all_matches(profile_store, match_repo)

        assert set(out) == {"m1", "s1", "s2", "m2", "s3"}
        assert len(match_repo) == 6
        assert len(out["s3"]) == 4

    def test_progress_reported(self, profile_store, match_repo):
        seen = []
        generate_all_matches(
            profile_store, match_repo, progress_fn=lambda done, total, uid: seen.append((done, total, uid))
        )
        assert seen[0] == (1, 5, "m1")
        assert seen[-1] == (5, 5, "s3")

    def test_progress_errors_do_not_stop_batch(self, profile_store, match_repo, caplog):
        def broken(done, total, uid):
            raise RuntimeError("display gone")

        out = generate_all_matches(profile_store, match_repo, progress_fn=broken)

        assert len(out) == 5
        assert "Progress callback failed" in caplog.text


class TestListUserMatches:
    def test_both_positions(self, profile_store, match_repo):
        generate_all_matches(profile_store, match_repo)

        records = list_user_matches("s3", match_repo)

        assert len(records) == 4
        assert records[0].other_user("s3") == "m1"
        assert records[0].compatibility_score == 6.6

    def test_no_matches(self, match_repo):
        assert list_user_matches("m2", match_repo) == []


class TestRespondToMatch:
    """pending -> accepted | rejected, nothing else."""

    @pytest.fixture
    def pending(self, profile_store, match_repo):
        return generate_matches("m1", profile_store, match_repo)[0]

    @pytest.mark.parametrize("status", ["accepted", "rejected"])
    def test_response(self, pending, match_repo, status):
        updated = respond_to_match(pending.id, status, match_repo)
        assert updated.status == status
        assert match_repo.get(pending.id).status == status

    def test_only_once(self, pending, match_repo):
        respond_to_match(pending.id, "accepted", match_repo)
        with pytest.raises(ValueError, match="already accepted"):
            respond_to_match(pending.id, "rejected", match_repo)

    def test_pending_is_not_a_response(self, pending, match_repo):
        with pytest.raises(ValueError):
            respond_to_match(pending.id, "pending", match_repo)

    def test_unknown_match(self, match_repo):
        with pytest.raises(MatchNotFoundError):
            respond_to_match("missing", "accepted", match_repo)
