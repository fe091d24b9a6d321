"""Tests for merging, ranking and diversity selection."""

import pytest

from ..models import Candidate, SignalType
from .ranking import fuse_scores, merge_candidates, rank_candidates, select_diverse


def _cand(cid: str, score: float, signal: SignalType = SignalType.MUTUAL, reason: str | None = None, **metadata):
    return Candidate(
        candidate_id=cid,
        score=score,
        reasons=[reason or f"{signal.value} reason"],
        signal_types=[signal],
        metadata=metadata,
    )


# ---------------------------------------------------------------------------
# merge_candidates
# ---------------------------------------------------------------------------

class TestMergeCandidates:
    def test_single_sighting_inserted_as_is(self):
        merged = merge_candidates([[_cand("bob", 30.0)]], "alice", set())
        assert list(merged) == ["bob"]
        assert merged["bob"].score == 30.0

    def test_repeat_sighting_fuses(self):
        mutual = _cand("bob", 30.0, SignalType.MUTUAL, "2 mutual connections", mutual_connections=2)
        activity = _cand("bob", 32.0, SignalType.ACTIVITY, "Liked 4 of your photos", interactions=4)

        merged = merge_candidates([[mutual], [activity]], "alice", set())

        bob = merged["bob"]
        assert bob.score == pytest.approx(32.0 + 32.0 * 0.3)
        assert bob.reasons == ["2 mutual connections", "Liked 4 of your photos"]
        assert bob.signal_types == [SignalType.MUTUAL, SignalType.ACTIVITY]
        assert bob.metadata == {"mutual_connections": 2, "interactions": 4}

    def test_fusion_is_order_dependent(self):
        assert fuse_scores(10.0, 40.0) == pytest.approx(52.0)
        assert fuse_scores(40.0, 10.0) == pytest.approx(43.0)

    @pytest.mark.parametrize("s1,s2", [(1.0, 1.0), (80.0, 5.0), (5.0, 80.0), (0.1, 60.0)])
    def test_fusion_never_decreases_score(self, s1, s2):
        assert fuse_scores(s1, s2) >= max(s1, s2)

    def test_same_signal_twice_keeps_type_once(self):
        merged = merge_candidates(
            [[_cand("bob", 10.0, SignalType.LOCATION), _cand("bob", 20.0, SignalType.LOCATION)]],
            "alice",
            set(),
        )
        assert merged["bob"].signal_types == [SignalType.LOCATION]
        assert len(merged["bob"].reasons) == 2

    def test_excludes_self_and_followed(self):
        merged = merge_candidates(
            [[_cand("alice", 50.0), _cand("bob", 40.0)], [_cand("carol", 30.0)]],
            "alice",
            {"bob"},
        )
        assert list(merged) == ["carol"]

    def test_does_not_mutate_generator_output(self):
        first = _cand("bob", 30.0)
        merge_candidates([[first], [_cand("bob", 30.0, SignalType.POPULAR)]], "alice", set())
        assert first.score == 30.0
        assert first.signal_types == [SignalType.MUTUAL]
        assert len(first.reasons) == 1


# ---------------------------------------------------------------------------
# rank_candidates
# ---------------------------------------------------------------------------

class TestRankCandidates:
    def test_sorts_descending_and_is_stable(self):
        ranked = rank_candidates([_cand("a", 10), _cand("b", 30), _cand("c", 10), _cand("d", 30)])
        assert [c.candidate_id for c in ranked] == ["b", "d", "a", "c"]


# ---------------------------------------------------------------------------
# select_diverse
# ---------------------------------------------------------------------------

class TestSelectDiverse:
    def test_returns_at_most_k(self):
        ranked = [_cand(str(i), 100 - i) for i in range(20)]
        assert len(select_diverse(ranked, 10)) == 10

    def test_fewer_candidates_than_k(self):
        ranked = [_cand("a", 3), _cand("b", 2)]
        assert [c.candidate_id for c in select_diverse(ranked, 10)] == ["a", "b"]

    def test_non_positive_k(self):
        assert select_diverse([_cand("a", 1)], 0) == []

    def test_fills_to_k_even_when_one_signal_dominates(self):
        ranked = [_cand(f"m{i}", 80 - i, SignalType.MUTUAL) for i in range(6)]
        ranked.append(_cand("p0", 10, SignalType.POPULAR))

        selected = select_diverse(ranked, 6)

        # Quota for k=6 is 2, but the remaining slots are filled in score order.
        assert [c.candidate_id for c in selected] == [f"m{i}" for i in range(6)]

    def test_preserves_score_order(self):
        ranked = rank_candidates([
            _cand("m1", 70, SignalType.MUTUAL),
            _cand("l1", 65, SignalType.LOCATION),
            _cand("a1", 60, SignalType.ACTIVITY),
            _cand("p1", 40, SignalType.POPULAR),
        ])
        assert [c.candidate_id for c in select_diverse(ranked, 3)] == ["m1", "l1", "a1"]

    def test_uses_primary_signal(self):
        multi = Candidate(
            candidate_id="x",
            score=50,
            reasons=["r1", "r2"],
            signal_types=[SignalType.ACTIVITY, SignalType.MUTUAL],
        )
        assert multi.primary_signal is SignalType.ACTIVITY
        assert select_diverse([multi], 1) == [multi]
