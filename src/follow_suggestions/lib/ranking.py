"""Merging, ranking and diversity selection of suggestion candidates."""

import logging
import math
from collections import Counter
from collections.abc import Collection, Iterable

from .. import config
from ..models import Candidate, SignalType

logger = logging.getLogger(__name__)


def fuse_scores(existing: float, incoming: float) -> float:
    """Combine the score of a repeat sighting into the one already held.

    Order-dependent: the incoming score is the one that earns the bonus.
    """
    return max(existing, incoming) + incoming * config.MERGE_BOOST


def _merge_into(existing: Candidate, incoming: Candidate) -> None:
    existing.score = fuse_scores(existing.score, incoming.score)
    existing.reasons.extend(incoming.reasons)
    for signal in incoming.signal_types:
        if signal not in existing.signal_types:
            existing.signal_types.append(signal)
    for key, value in incoming.metadata.items():
        existing.metadata.setdefault(key, value)


def merge_candidates(
    candidate_lists: Iterable[Iterable[Candidate]],
    user_id: str,
    following: Collection[str],
) -> dict[str, Candidate]:
    """Deduplicate candidates from every signal into one mapping by id.

    Candidates are copied, so the generators' lists are left untouched.
    The requester and accounts they already follow are dropped afterwards,
    whatever the individual signals did.
    """
    merged: dict[str, Candidate] = {}
    for candidates in candidate_lists:
        for candidate in candidates:
            existing = merged.get(candidate.candidate_id)
            if existing is None:
                merged[candidate.candidate_id] = candidate.model_copy(deep=True)
            else:
                _merge_into(existing, candidate)

    excluded = [cid for cid in merged if cid == user_id or cid in following]
    for cid in excluded:
        logger.debug("Dropping already-followed or self candidate %s", cid)
        del merged[cid]
    return merged


def rank_candidates(candidates: Iterable[Candidate]) -> list[Candidate]:
    """Order by fused score, highest first.  Ties keep discovery order."""
    return sorted(candidates, key=lambda c: c.score, reverse=True)


def select_diverse(ranked: Iterable[Candidate], k: int) -> list[Candidate]:
    """Pick up to *k* candidates while tracking a per-signal quota.

    Each candidate counts against its primary signal.  A candidate is taken
    when its signal is within ``ceil(k / 3)`` or when the output still has
    room, so the list fills up to *k* whenever enough candidates exist.
    """
    if k <= 0:
        return []

    quota = math.ceil(k / 3)
    seen: Counter[SignalType] = Counter()
    selected: list[Candidate] = []
    for candidate in ranked:
        signal = candidate.primary_signal
        seen[signal] += 1
        if seen[signal] <= quota or len(selected) < k:
            selected.append(candidate)
            if len(selected) >= k:
                break
    return selected
