"""Popularity signal.

Returns creators with the most engagement across recent platform-wide posts,
independent of the requester's own graph:

* Scan the most recent posts from the last week.
* Skip posts by the requester or by accounts they already follow.
* Sum the likes each remaining author received across those posts.
* Keep the top authors that clear a minimum engagement.

Likers lookups are issued concurrently, bounded by a semaphore.
"""

import logging
from collections import Counter
from datetime import datetime, timedelta, timezone

from ... import config
from ...models import Candidate, SignalType
from ..concurrency import gather_isolated
from ..social_graph import SocialGraphReader
from ..store import ContentStore
from .base import SignalContext, SignalGenerator

logger = logging.getLogger(__name__)


def popularity_score(engagement: float) -> float:
    return min(engagement * 2, 40)


class PopularitySignalGenerator(SignalGenerator):
    """Creators trending platform-wide.

    ``context.posts`` and ``context.location`` are not used; only the
    requester's id and following set matter here.
    """

    @property
    def signal_type(self) -> SignalType:
        return SignalType.POPULAR

    async def generate(
        self,
        store: ContentStore,
        social_graph: SocialGraphReader,
        context: SignalContext,
    ) -> list[Candidate]:
        since = datetime.now(timezone.utc) - timedelta(days=config.POPULARITY_WINDOW_DAYS)
        recent = await store.fetch_recent_global_posts(since, config.POPULARITY_GLOBAL_POSTS)

        posts = [
            p for p in recent
            if p.author_id and p.author_id != context.user_id
            and p.author_id not in context.following
        ]
        if not posts:
            return []

        likers_per_post = await gather_isolated(
            (store.fetch_likers(post.id) for post in posts),
            default=[],
            label="likers lookup",
            limit=config.POPULARITY_LIKERS_CONCURRENCY,
        )

        engagement: Counter[str] = Counter()
        for post, likers in zip(posts, likers_per_post):
            engagement[post.author_id] += len(likers)

        # sorted() is stable, so equal engagement keeps discovery order.
        top_authors = sorted(engagement.items(), key=lambda item: -item[1])
        top_authors = top_authors[: config.POPULARITY_TOP_AUTHORS]

        return [
            Candidate(
                candidate_id=author_id,
                score=popularity_score(total),
                reasons=["Popular creator"],
                signal_types=[SignalType.POPULAR],
                metadata={"recent_engagement": round(total)},
            )
            for author_id, total in top_authors
            if total >= config.POPULARITY_MIN_ENGAGEMENT
        ]
