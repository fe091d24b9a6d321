"""Activity signal: accounts that keep liking the requester's posts."""

import logging
from collections import Counter

from ... import config
from ...models import Candidate, SignalType
from ..concurrency import gather_isolated
from ..social_graph import SocialGraphReader
from ..store import ContentStore
from .base import SignalContext, SignalGenerator

logger = logging.getLogger(__name__)


def activity_score(interaction_count: int) -> float:
    return min(interaction_count * 8, 60)


class ActivitySignalGenerator(SignalGenerator):
    @property
    def signal_type(self) -> SignalType:
        return SignalType.ACTIVITY

    async def generate(
        self,
        store: ContentStore,
        social_graph: SocialGraphReader,
        context: SignalContext,
    ) -> list[Candidate]:
        posts = context.posts[: config.ACTIVITY_RECENT_POSTS]
        if not posts:
            return []

        likers_per_post = await gather_isolated(
            (store.fetch_likers(post.id) for post in posts),
            default=[],
            label="likers lookup",
        )

        counts: Counter[str] = Counter()
        for likers in likers_per_post:
            counts.update(liker for liker in likers if liker and liker != context.user_id)

        return [
            Candidate(
                candidate_id=liker_id,
                score=activity_score(interaction_count),
                reasons=[f"Liked {interaction_count} of your photos"],
                signal_types=[SignalType.ACTIVITY],
                metadata={"interactions": interaction_count},
            )
            for liker_id, interaction_count in counts.items()
            if interaction_count >= config.ACTIVITY_MIN_INTERACTIONS
        ]
