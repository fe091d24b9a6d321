"""Mutual-connections signal: accounts followed by several people the requester follows."""

import logging
from collections import Counter

from ... import config
from ...models import Candidate, SignalType
from ..concurrency import chunked, gather_isolated
from ..social_graph import SocialGraphReader
from ..store import ContentStore
from .base import SignalContext, SignalGenerator

logger = logging.getLogger(__name__)


def mutual_score(mutual_count: int) -> float:
    return min(mutual_count * 15, 80)


class MutualSignalGenerator(SignalGenerator):
    """Friends-of-friends, ranked by how many followed accounts share them.

    Followed accounts are looked up in batches; each batch runs concurrently
    and completes before the next one starts.
    """

    @property
    def signal_type(self) -> SignalType:
        return SignalType.MUTUAL

    async def generate(
        self,
        store: ContentStore,
        social_graph: SocialGraphReader,
        context: SignalContext,
    ) -> list[Candidate]:
        if not context.following:
            return []

        counts: Counter[str] = Counter()
        for batch in chunked(sorted(context.following), config.MUTUAL_BATCH_SIZE):
            their_following = await gather_isolated(
                (social_graph.get_following(followed_id) for followed_id in batch),
                default=frozenset(),
                label="following lookup",
            )
            for accounts in their_following:
                counts.update(a for a in accounts if a != context.user_id)

        return [
            Candidate(
                candidate_id=account_id,
                score=mutual_score(mutual_count),
                reasons=[f"{mutual_count} mutual connections"],
                signal_types=[SignalType.MUTUAL],
                metadata={"mutual_connections": mutual_count},
            )
            for account_id, mutual_count in counts.items()
            if mutual_count >= config.MUTUAL_MIN_CONNECTIONS
        ]
